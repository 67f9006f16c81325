"""
Session token lifecycle.

The session manager is the only owner of the cached token. It hands out
tokens that are guaranteed not to expire within the safety margin and
exchanges the stored credential for a new token when needed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

import httpx

from elestio.api.config import AUTH_ENDPOINT
from elestio.exceptions import AuthenticationError, ConfigurationError
from elestio.logging import get_logger
from elestio.models.session import Credential, Session

if TYPE_CHECKING:
    from elestio.store import CredentialStore, SessionStore

logger = get_logger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(hours=23)
DEFAULT_REFRESH_MARGIN = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """
    Owns the session token and its expiry.

    Example:
        >>> manager = SessionManager(credentials, sessions, http)
        >>> token = await manager.get_valid_token()
        >>> manager.invalidate()  # next call re-authenticates
    """

    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionStore,
        http: httpx.AsyncClient,
        token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        refresh_margin: timedelta = DEFAULT_REFRESH_MARGIN,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize session manager.

        Args:
            credentials: Store holding the account credential.
            sessions: Store persisting the token across invocations.
            http: HTTP client bound to the API base URL.
            token_lifetime: Validity assumed for a freshly issued token.
            refresh_margin: Re-authenticate this long before expiry.
            now: Clock returning timezone-aware datetimes.
        """
        self._credentials = credentials
        self._sessions = sessions
        self._http = http
        self._token_lifetime = token_lifetime
        self._refresh_margin = refresh_margin
        self._now = now
        self._session: Session | None = None

    @property
    def session(self) -> Session:
        """Current session, loaded from the store on first access."""
        if self._session is None:
            self._session = self._sessions.load()
        return self._session

    def is_valid(self) -> bool:
        return self.session.is_valid(self._now(), self._refresh_margin)

    async def get_valid_token(self) -> str:
        """
        Get a token usable for at least the safety margin.

        Raises:
            ConfigurationError: No credential is configured.
            AuthenticationError: The credential exchange failed.
        """
        credential = self._credentials.load()
        if credential is None:
            raise ConfigurationError()

        if not self.is_valid():
            logger.debug("Session token missing or near expiry, authenticating")
            self._set(await self.authenticate(credential))

        return self.session.token  # type: ignore[return-value]

    def invalidate(self) -> None:
        """Clear the cached token so the next call re-authenticates."""
        self._set(Session())

    async def authenticate(self, credential: Credential) -> Session:
        """
        Exchange a credential for a new session.

        Args:
            credential: Account identity and API token.

        Returns:
            New session expiring after the configured token lifetime.

        Raises:
            AuthenticationError: Rejected credential or failed exchange.
        """
        try:
            response = await self._http.post(
                AUTH_ENDPOINT,
                json={"email": credential.identity, "token": credential.secret},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Authentication request failed: {e}", cause=e) from e

        try:
            data = response.json()
        except ValueError as e:
            raise AuthenticationError(
                f"Authentication failed (HTTP {response.status_code})", cause=e
            ) from e

        if not isinstance(data, dict) or data.get("status") != "OK" or not data.get("jwt"):
            message = data.get("message") if isinstance(data, dict) else None
            raise AuthenticationError(message or "Authentication failed")

        logger.debug(f"Authenticated as {credential.identity}")
        return Session(token=data["jwt"], expiry=self._now() + self._token_lifetime)

    async def login(self, identity: str, secret: str) -> Session:
        """
        Verify a credential, then store it along with the new session.

        Nothing is written when authentication fails.
        """
        session = await self.authenticate(Credential(identity=identity, secret=secret))
        self._credentials.save(identity, secret)
        self._set(session)
        return session

    async def refresh(self) -> Session:
        """Authenticate with the stored credential regardless of expiry."""
        credential = self._credentials.load()
        if credential is None:
            raise ConfigurationError()
        self._set(await self.authenticate(credential))
        return self.session

    def _set(self, session: Session) -> None:
        self._session = session
        self._sessions.save(session.token, session.expiry)


__all__ = ["SessionManager", "DEFAULT_TOKEN_LIFETIME", "DEFAULT_REFRESH_MARGIN"]
