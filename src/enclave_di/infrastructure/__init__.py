"""
Infrastructure layer - External integrations.

This layer contains the FastAPI integration and the testing helpers.
It depends on both Application and Domain layers.
"""

from . import fastapi_integration, testing

__all__ = [
    "fastapi_integration",
    "testing",
]
