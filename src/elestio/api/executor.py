"""
Authenticated request executor.

Every authenticated API call goes through :meth:`RequestExecutor.execute`:
the current token is attached, the response is checked for auth-failure
signals, and a rejected token triggers exactly one refresh-and-retry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

import httpx

from elestio.api.signals import DEFAULT_AUTH_FAILURE_SIGNALS, AuthFailureSignal, is_auth_failure
from elestio.exceptions import AuthRetryExhausted, InvalidResponseError
from elestio.logging import get_logger
from elestio.models.request import ApiRequest, HttpMethod

if TYPE_CHECKING:
    from elestio.api.session import SessionManager

logger = get_logger(__name__)

_UNDECODED = object()


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return _UNDECODED


def _server_message(body: Any) -> str | None:
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


class RequestExecutor:
    """
    Sends API requests with the session token.

    Example:
        >>> executor = RequestExecutor(session_manager, http)
        >>> data = await executor.request("/api/projects/getList")
        >>> sizes = await executor.execute_unauthenticated(
        ...     ApiRequest(endpoint="/api/servers/getServerSizes", method="GET")
        ... )
    """

    def __init__(
        self,
        session: SessionManager,
        http: httpx.AsyncClient,
        signals: Iterable[AuthFailureSignal] = DEFAULT_AUTH_FAILURE_SIGNALS,
    ) -> None:
        """
        Initialize executor.

        Args:
            session: Session manager providing tokens.
            http: HTTP client bound to the API base URL.
            signals: Predicates recognizing auth-failure responses.
        """
        self._session = session
        self._http = http
        self._signals = tuple(signals)

    @property
    def signals(self) -> tuple[AuthFailureSignal, ...]:
        return self._signals

    async def execute(self, request: ApiRequest) -> Any:
        """
        Execute an authenticated request.

        On an auth-failure signal the session is invalidated and the call is
        retried once with a fresh token.

        Args:
            request: Endpoint, method and parameters.

        Returns:
            Parsed JSON body, unmodified.

        Raises:
            ConfigurationError: No credential configured.
            AuthenticationError: Token exchange failed.
            AuthRetryExhausted: Auth failure persisted after the retry.
            InvalidResponseError: Body is not JSON.
            httpx.HTTPError: Transport failure.
        """
        for attempt in (1, 2):
            token = await self._session.get_valid_token()
            response = await self._send(request, token)
            body = _decode(response)

            if is_auth_failure(response.status_code, body, self._signals):
                if attempt == 1:
                    logger.debug(
                        f"Auth failure on {request.method.value} {request.endpoint} "
                        f"(HTTP {response.status_code}), refreshing token"
                    )
                    self._session.invalidate()
                    continue
                raise AuthRetryExhausted(response.status_code, _server_message(body))

            if body is _UNDECODED:
                raise InvalidResponseError(response.status_code)
            return body

        raise AssertionError("unreachable")

    async def request(
        self,
        endpoint: str,
        method: HttpMethod | str = HttpMethod.POST,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Shorthand for ``execute(ApiRequest(...))``."""
        return await self.execute(
            ApiRequest(endpoint=endpoint, method=HttpMethod(method), params=params or {})
        )

    async def execute_unauthenticated(self, request: ApiRequest) -> Any:
        """
        Execute a request against a public endpoint.

        No token is sent and auth failures are not retried.
        """
        response = await self._send(request, token=None)
        body = _decode(response)
        if body is _UNDECODED:
            raise InvalidResponseError(response.status_code)
        return body

    async def _send(self, request: ApiRequest, token: str | None) -> httpx.Response:
        auth = {"jwt": token} if token is not None else {}
        logger.debug(f"{request.method.value} {request.endpoint}")

        if request.sends_query:
            return await self._http.get(request.endpoint, params={**auth, **request.params})

        return await self._http.request(
            request.method.value,
            request.endpoint,
            json={**auth, **request.params},
        )


__all__ = ["RequestExecutor"]
