"""
Property source module.

Provides the environment and mapping backed property resolver used for
``Value`` injection.
"""

from .resolver import PropertyResolver

__all__ = [
    "PropertyResolver",
]
