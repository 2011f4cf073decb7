"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
"""

from toolbridge.routers import chat, health

__all__ = [
    "chat",
    "health",
]
