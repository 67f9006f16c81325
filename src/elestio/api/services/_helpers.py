"""Shared helpers for API service wrappers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from elestio.exceptions import APIError, ConfigurationError

if TYPE_CHECKING:
    from elestio.store import ConfigStore


def require_project(project_id: str | int | None, config_store: ConfigStore) -> str:
    """Explicit project id, else the configured default."""
    pid = project_id or config_store.load().default_project
    if not pid:
        raise ConfigurationError(
            "Project ID required. Use --project or set default with: "
            "elestio config set-default-project <id>"
        )
    return str(pid)


def ensure_ok(response: Any, default_message: str) -> dict[str, Any]:
    """Raise APIError unless the body reports ``status: OK``."""
    if not isinstance(response, dict) or response.get("status") != "OK":
        raise APIError(_message(response) or default_message, response=response)
    return response


def _message(response: Any) -> str | None:
    if isinstance(response, dict):
        return response.get("message")
    return None


def nested(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None on any missing level."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data
