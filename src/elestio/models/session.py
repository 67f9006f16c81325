"""
Session and credential models.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict


class Credential(BaseModel):
    """Account identity and API token used for authentication."""

    model_config = ConfigDict(frozen=True)

    identity: str
    secret: str

    def __repr__(self) -> str:
        return f"Credential(identity={self.identity!r}, secret='***')"


class Session(BaseModel):
    """Cached session token and its absolute expiry (UTC)."""

    token: str | None = None
    expiry: datetime | None = None

    def is_valid(self, now: datetime, margin: timedelta) -> bool:
        """
        Check whether the token can still be used.

        The session stops being valid once ``now`` passes ``expiry - margin``.

        Args:
            now: Current time (timezone-aware).
            margin: Safety margin before the recorded expiry.
        """
        if not self.token or self.expiry is None:
            return False
        return now <= self.expiry - margin
