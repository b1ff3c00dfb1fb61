"""
Testing utilities module.

Provides helpers and utilities for testing applications using grove-di.
"""

from .utilities import ContextScope, RecordingPostProcessor, build_test_context

__all__ = [
    "build_test_context",
    "ContextScope",
    "RecordingPostProcessor",
]
