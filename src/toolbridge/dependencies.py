"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings, the session
manager and the caller's session identifier.
"""

import uuid
from functools import lru_cache

from fastapi import HTTPException, Request, Response

from toolbridge.config import ToolbridgeSettings
from toolbridge.sessions import SessionManager


@lru_cache
def get_settings() -> ToolbridgeSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLBRIDGE_ prefix.

    Returns:
        ToolbridgeSettings: The application configuration settings.
    """
    return ToolbridgeSettings()


def get_session_manager(request: Request) -> SessionManager:
    """Get the SessionManager created during application startup.

    Args:
        request: The FastAPI request object.

    Returns:
        SessionManager: The process-wide session manager.

    Raises:
        HTTPException: If the session manager is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "session_manager"):
        raise HTTPException(
            status_code=503,
            detail="Session manager not initialized",
        )
    return request.app.state.session_manager


def get_session_id(request: Request) -> str:
    """Get the caller's session identifier from its session cookie.

    A fresh identifier is minted when the request carries none; routes
    send it back with attach_session_cookie().
    """
    settings: ToolbridgeSettings = request.app.state.settings
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        return session_id
    return uuid.uuid4().hex


def attach_session_cookie(
    response: Response, session_id: str, settings: ToolbridgeSettings
) -> None:
    """Set the session cookie on an outgoing response."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        httponly=True,
        samesite="lax",
    )
