"""
Infrastructure layer - External integrations.

FastAPI wiring for containers and helpers for testing code that consumes them.
It depends on both Application and Domain layers.
"""

from . import fastapi_integration, testing

__all__ = [
    "fastapi_integration",
    "testing",
]
