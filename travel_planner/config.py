"""Configuration for the Travel Planner MCP Server.

All values are read from the environment (or a local ``.env`` file).
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    mcp_transport: Literal["http", "stdio"] = "http"

    # CORS (comma-separated list, "*" allows all)
    cors_allowed_origins: str = "*"

    # Sessions
    heartbeat_interval: float = Field(default=15.0, gt=0)
    session_idle_timeout: float | None = Field(default=None, gt=0)
    # Idle expiry for sessions established by POST initialize
    direct_session_idle_timeout: float | None = Field(default=1800.0, gt=0)
    session_reap_interval: float = Field(default=30.0, gt=0)
    session_tombstone_limit: int = Field(default=10_000, ge=0)

    # Requests
    max_json_payload_size: int = 1_048_576

    # Error tracking
    sentry_dsn: str | None = None

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list."""
        if self.cors_allowed_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


settings = Settings()
