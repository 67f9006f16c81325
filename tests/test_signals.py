"""
Tests for auth-failure signal detection.
"""

from __future__ import annotations

import pytest

from elestio.api.signals import (
    DEFAULT_AUTH_FAILURE_SIGNALS,
    error_status_mentions_auth,
    invalid_token_code,
    is_auth_failure,
    message_mentions_invalid_token,
    unauthorized_status,
)


class TestDefaultSignals:
    """Responses recognized as rejected tokens."""

    @pytest.mark.parametrize(
        "status, body",
        [
            (401, None),
            (401, {"status": "OK"}),
            (200, {"code": "InvalidToken"}),
            (200, {"status": "error", "message": "Invalid Auth Token"}),
            (200, {"status": "error", "message": "Not AUTHORIZED"}),
            (200, {"status": "KO", "message": "Invalid token provided"}),
        ],
    )
    def test_detected(self, status, body):
        assert is_auth_failure(status, body)

    @pytest.mark.parametrize(
        "status, body",
        [
            (200, {"status": "OK", "data": []}),
            (200, {"status": "KO", "message": "Project not found"}),
            (200, {"status": "error", "message": "Server busy"}),
            (500, {"status": "KO"}),
            (200, ["not", "a", "dict"]),
            (403, None),
        ],
    )
    def test_not_detected(self, status, body):
        assert not is_auth_failure(status, body)

    def test_default_set(self):
        assert DEFAULT_AUTH_FAILURE_SIGNALS == (
            unauthorized_status,
            invalid_token_code,
            error_status_mentions_auth,
            message_mentions_invalid_token,
        )


class TestCustomSignals:
    """The signal set is configurable."""

    def test_empty_set_never_matches(self):
        assert not is_auth_failure(401, None, signals=())

    def test_extra_signal(self):
        def forbidden(status_code, body):
            return status_code == 403

        assert is_auth_failure(403, None, signals=(*DEFAULT_AUTH_FAILURE_SIGNALS, forbidden))

    def test_non_string_message_ignored(self):
        assert not message_mentions_invalid_token(200, {"message": 42})
