"""Configuration settings for octomatiz.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_db_url() -> str:
    """Return the default database URL (SQLite)."""
    db_path = Path.home() / ".local" / "share" / "octomatiz" / "db.sqlite"
    return f"sqlite:///{db_path}"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the OCTO_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="OCTO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    db_url: str = Field(
        default_factory=_default_db_url,
        description="Database connection URL backing the key-value store",
    )
    kv_enabled: bool = Field(
        default=True,
        description="Attach the key-value store (disabled means storage unavailable)",
    )
    page_ttl_seconds: int | None = Field(
        default=None,
        ge=60,
        description="Expiry for published pages (never expires if not set)",
    )

    # Public URLs
    public_base_url: str | None = Field(
        default=None,
        description="Base URL for published links (request URL if not set)",
    )
    domain_suffix: str = Field(
        default="octomatiz.site",
        description="Domain suffix reported for published pages",
    )
    page_cache_max_age: int = Field(
        default=3600,
        ge=0,
        description="Cache-Control max-age for served pages (seconds)",
    )

    # Short links
    shortener_providers: list[str] = Field(
        default_factory=lambda: ["is.gd", "v.gd"],
        description="External shortening providers in priority order",
    )
    shortener_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout per external shortening attempt (seconds)",
    )

    # Rate limiting
    deploy_rate_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum deploy requests per client per window",
    )
    deploy_rate_window_ms: int = Field(
        default=60_000,
        ge=1000,
        description="Deploy rate limit window (milliseconds)",
    )

    # Server
    host: str = Field(default="127.0.0.1", description="Bind address for serve")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for serve")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
