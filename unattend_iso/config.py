"""Configuration settings for unattend_iso.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: env vars > .env file > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_db_url() -> str:
    """Return the default state store URL (SQLite)."""
    db_path = Path.home() / ".local" / "share" / "unattend-iso" / "state.sqlite"
    return f"sqlite:///{db_path}"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the UNATTEND_ISO_
    prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="UNATTEND_ISO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    db_url: str = Field(
        default_factory=_default_db_url,
        description="Tracked state store URL",
    )
    tmp_dir: Path | None = Field(
        default=None,
        description="Directory for images without a path override "
        "(uses system default if not set)",
    )

    # Image
    volume_name: str = Field(
        default="unattend",
        min_length=1,
        max_length=32,
        pattern=r"^[\x20-\x7e]+$",
        description="ISO-9660 volume identifier (printable ASCII)",
    )

    # Operational modes
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings.

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
