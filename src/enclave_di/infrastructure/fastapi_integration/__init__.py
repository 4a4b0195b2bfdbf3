"""
FastAPI integration module.

Provides helpers for resolving container keys in FastAPI endpoints.
"""

from .integration import (
    ScopedContainerMiddleware,
    create_fastapi_dependency,
    create_scoped_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_scoped_dependency",
    "ScopedContainerMiddleware",
]
