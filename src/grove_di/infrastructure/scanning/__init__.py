"""
Component scanning module.

Provides the package walker that turns a root configuration type into the
fully-qualified type names an application context is built from.
"""

from .scanner import ComponentScanner

__all__ = [
    "ComponentScanner",
]
