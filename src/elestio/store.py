"""
Local file stores for credentials, session and CLI configuration.

Layout under ``config_dir`` (``~/.elestio`` by default):

- ``credentials``: ``{"email": ..., "apiToken": ...}``, mode 0600
- ``config.json``: session token, default project and deploy defaults
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from elestio.logging import get_logger
from elestio.models.config import LocalConfig
from elestio.models.session import Credential, Session

logger = get_logger(__name__)

CREDENTIALS_FILE = "credentials"
CONFIG_FILE = "config.json"


def _ensure_dir(directory: Path) -> None:
    if not directory.exists():
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Ignoring unreadable {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


class CredentialStore:
    """Reads and writes the account credential."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def path(self) -> Path:
        return self._directory / CREDENTIALS_FILE

    def load(self) -> Credential | None:
        """Return the stored credential, or None if incomplete."""
        data = _read_json(self.path)
        email = data.get("email")
        token = data.get("apiToken")
        if not email or not token:
            return None
        return Credential(identity=email, secret=token)

    def save(self, identity: str, secret: str) -> None:
        _ensure_dir(self._directory)
        self.path.touch(mode=0o600)
        os.chmod(self.path, 0o600)
        self.path.write_text(
            json.dumps({"email": identity, "apiToken": secret}, indent=2),
            encoding="utf-8",
        )


class ConfigStore:
    """Reads and writes ``config.json``."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def path(self) -> Path:
        return self._directory / CONFIG_FILE

    def load(self) -> LocalConfig:
        data = _read_json(self.path)
        try:
            return LocalConfig.model_validate(data)
        except ValidationError as e:
            logger.debug(f"Ignoring invalid {self.path}: {e}")
            return LocalConfig()

    def save(self, config: LocalConfig) -> None:
        _ensure_dir(self._directory)
        self.path.write_text(
            json.dumps(config.model_dump(by_alias=True), indent=2),
            encoding="utf-8",
        )


class SessionStore:
    """Persists the session token inside ``config.json``."""

    def __init__(self, config_store: ConfigStore) -> None:
        self._config_store = config_store

    def load(self) -> Session:
        config = self._config_store.load()
        expiry = None
        if config.jwt_expiry is not None:
            expiry = datetime.fromtimestamp(config.jwt_expiry / 1000, tz=timezone.utc)
        return Session(token=config.jwt, expiry=expiry)

    def save(self, token: str | None, expiry: datetime | None) -> None:
        config = self._config_store.load()
        config.jwt = token
        config.jwt_expiry = int(expiry.timestamp() * 1000) if expiry else None
        self._config_store.save(config)


__all__ = ["CredentialStore", "ConfigStore", "SessionStore"]
