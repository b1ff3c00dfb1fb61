"""
Infrastructure layer - External integrations.

This layer contains the property source, component scanning, AOP proxies
and integrations with external frameworks and tools.
It depends on both Application and Domain layers.
"""

from . import aop, properties, scanning, testing

__all__ = [
    "aop",
    "properties",
    "scanning",
    "testing",
]
