"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of toolbridge.
        llm_provider: The configured completion provider.
        model: The configured completion model.
        llm_connected: Whether the completion provider is reachable.
        active_sessions: Number of live conversation sessions.
        tools: Tool names available in the persistent session, if it is live.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of toolbridge")
    llm_provider: str | None = Field(
        default=None, description="Configured completion provider"
    )
    model: str | None = Field(default=None, description="Configured completion model")
    llm_connected: bool | None = Field(
        default=None, description="Whether the completion provider is reachable"
    )
    active_sessions: int = Field(default=0, description="Number of live sessions")
    tools: list[str] = Field(
        default_factory=list,
        description="Tool names available in the persistent session",
    )
