"""
Controllers Package - Presentation Layer

This package contains FastAPI controllers (routers) that handle
HTTP requests and responses. Controllers are responsible for
input validation, error handling, and mapping between API DTOs
and application layer use cases.
"""

from .planning_controller import router as planning_router
from .system_controller import router as system_router
from .workflows_controller import router as workflows_router

__all__ = ["planning_router", "system_router", "workflows_router"]
