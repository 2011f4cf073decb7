"""Configuration module for toolbridge using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOOL_SERVER_PATH = Path(__file__).parent / "provider" / "server.py"


class ToolbridgeSettings(BaseSettings):
    """Main configuration settings for toolbridge.

    All settings can be overridden via environment variables with the
    TOOLBRIDGE_ prefix. For example, TOOLBRIDGE_MODEL will override the
    model setting. A local .env file is read as well.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Completion provider
    llm_provider: Literal["anthropic", "ollama"] = "anthropic"
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 1000
    anthropic_api_key: str | None = None
    ollama_host: str = "http://localhost:11434"

    # Tool provider
    tool_server_path: str = str(DEFAULT_TOOL_SERVER_PATH)
    tool_catalog_path: str | None = None
    connect_timeout: float = 10.0

    # Conversation loop
    completion_timeout: float | None = 120.0
    tool_call_timeout: float | None = 60.0
    max_tool_rounds: int = Field(default=5, ge=1)

    # Sessions
    persistent_session_id: str = "persistent-session"
    eager_persistent_session: bool = True
    session_cookie_name: str = "toolbridge_session"

    # Static frontend
    static_dir: str | None = None

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    # Upstream APIs used by the bundled tool server
    nws_api_base: str = "https://api.weather.gov"
    nws_user_agent: str = "weather-app/1.0"
    exchangerates_api_base: str = "https://api.apilayer.com/exchangerates_data"
    exchangerates_api_key: str | None = None
    phrase_api_url: str = "https://api.uomg.com/api/rand.qinghua"
    upstream_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="TOOLBRIDGE_",
        env_file=".env",
        extra="ignore",
    )

    # --- Resolved paths ---

    @property
    def resolved_tool_server_path(self) -> Path:
        """Get the tool provider entry point as an absolute path."""
        return Path(self.tool_server_path).expanduser().resolve()

    @property
    def resolved_tool_catalog_path(self) -> Path | None:
        """Get the static tool catalog path, if one is configured."""
        if self.tool_catalog_path is None:
            return None
        return Path(self.tool_catalog_path).expanduser().resolve()

    @property
    def resolved_static_dir(self) -> Path | None:
        """Get the static frontend directory, if one is configured."""
        if self.static_dir is None:
            return None
        return Path(self.static_dir).expanduser().resolve()
