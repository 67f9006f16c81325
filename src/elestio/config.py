"""
Elestio SDK settings.

Loaded from environment variables with the ``ELESTIO_`` prefix, e.g.
``ELESTIO_API_BASE_URL`` or ``ELESTIO_DEPLOY_TIMEOUT``.

Usage:
    >>> from elestio.config import get_settings, configure_settings
    >>> settings = get_settings()
    >>> settings.deploy_poll_interval
    15.0
    >>> configure_settings(log_level="DEBUG")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SDKSettings(BaseSettings):
    """Runtime settings for the Elestio client and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="ELESTIO_",
        extra="ignore",
    )

    # API
    api_base_url: str = "https://api.elest.io"
    request_timeout: float = Field(default=30.0, ge=1.0, le=300.0)

    # Session
    token_lifetime_hours: float = Field(default=23.0, ge=1.0, le=24.0)
    token_refresh_margin: float = Field(default=300.0, ge=0.0, le=3600.0)

    # Deployment polling
    deploy_poll_interval: float = Field(default=15.0, ge=1.0, le=300.0)
    deploy_not_found_interval: float = Field(default=10.0, ge=1.0, le=300.0)
    deploy_timeout: float = Field(default=600.0, ge=10.0, le=7200.0)

    # Local storage
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".elestio")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False


_settings: SDKSettings | None = None


def get_settings() -> SDKSettings:
    """Get the process-wide settings instance, creating it on first use."""
    global _settings
    if _settings is None:
        _settings = SDKSettings()
    return _settings


def configure_settings(**overrides: Any) -> SDKSettings:
    """
    Replace the settings instance with one built from overrides.

    Args:
        **overrides: Field values taking precedence over the environment.

    Returns:
        The new settings instance.
    """
    global _settings
    _settings = SDKSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access reloads them."""
    global _settings
    _settings = None


__all__ = ["SDKSettings", "get_settings", "configure_settings", "reset_settings"]
