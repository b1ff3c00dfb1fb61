"""
FastAPI integration module.

Provides helpers for consuming beans of a grove-di application context from FastAPI.
"""

from .integration import (
    ApplicationContextMiddleware,
    context_lifespan,
    create_fastapi_dependency,
    create_request_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "context_lifespan",
    "ApplicationContextMiddleware",
]
