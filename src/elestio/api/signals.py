"""
Auth-failure signals.

The API does not consistently use HTTP 401 for rejected tokens; some
endpoints answer 200 with an error body instead. Each signal is a predicate
``(status_code, body) -> bool``; the executor treats a response as an auth
failure when any predicate matches.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

AuthFailureSignal = Callable[[int, Any], bool]

INVALID_TOKEN_CODE = "InvalidToken"


def _message(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    message = body.get("message")
    return message.lower() if isinstance(message, str) else ""


def unauthorized_status(status_code: int, body: Any) -> bool:
    """HTTP 401."""
    return status_code == 401


def invalid_token_code(status_code: int, body: Any) -> bool:
    """Body carries the ``InvalidToken`` error code."""
    return isinstance(body, dict) and body.get("code") == INVALID_TOKEN_CODE


def error_status_mentions_auth(status_code: int, body: Any) -> bool:
    """``status: error`` with a message mentioning auth."""
    return (
        isinstance(body, dict)
        and body.get("status") == "error"
        and "auth" in _message(body)
    )


def message_mentions_invalid_token(status_code: int, body: Any) -> bool:
    """Any message containing "invalid token"."""
    return "invalid token" in _message(body)


DEFAULT_AUTH_FAILURE_SIGNALS: tuple[AuthFailureSignal, ...] = (
    unauthorized_status,
    invalid_token_code,
    error_status_mentions_auth,
    message_mentions_invalid_token,
)


def is_auth_failure(
    status_code: int,
    body: Any,
    signals: Iterable[AuthFailureSignal] = DEFAULT_AUTH_FAILURE_SIGNALS,
) -> bool:
    """Check a response against a set of auth-failure signals."""
    return any(signal(status_code, body) for signal in signals)


__all__ = [
    "AuthFailureSignal",
    "INVALID_TOKEN_CODE",
    "DEFAULT_AUTH_FAILURE_SIGNALS",
    "unauthorized_status",
    "invalid_token_code",
    "error_status_mentions_auth",
    "message_mentions_invalid_token",
    "is_auth_failure",
]
