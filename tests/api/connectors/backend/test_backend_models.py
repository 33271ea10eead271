"""Testes de ApiResponse, parse_error_body e RetryPolicy."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from api.connectors.backend import ApiResponse, NotificationEnvelope, RetryPolicy
from api.connectors.backend.errors import (
    GENERIC_ERROR_MESSAGE,
    ApiErrorBody,
    BackendNotReadyError,
    BackendUnreachableError,
    RequestAbortedError,
    RequestTimeoutError,
    TransportError,
    is_account_disabled,
    parse_error_body,
)


class TestApiResponse:
    def test_from_envelope(self) -> None:
        response = ApiResponse.from_body(
            {"success": False, "message": "no", "errors": ["e"], "accountDisabled": True}, 200
        )
        assert response.success is False
        assert response.errors == ["e"]
        assert response.account_disabled is True

    def test_from_bare_body(self) -> None:
        response = ApiResponse.from_body({"id": "p1"})
        assert response.success is True
        assert response.data == {"id": "p1"}

    def test_failure(self) -> None:
        response = ApiResponse.failure("Invalid credentials", status_code=401)
        assert not response.success
        assert response.message == "Invalid credentials"


class TestParseErrorBody:
    def test_full_body(self) -> None:
        parsed = parse_error_body(
            {"message": "bad", "code": "X", "field": "name", "errors": [1], "accountDisabled": True}
        )
        assert (parsed.message, parsed.code, parsed.field, parsed.errors) == ("bad", "X", "name", [1])
        assert parsed.account_disabled

    def test_field_and_raw_are_independent(self) -> None:
        """Campo `field` convive com `raw` default; instâncias não compartilham dict."""
        parsed = parse_error_body({"message": "Email já cadastrado", "field": "email"})
        assert parsed.field == "email"
        assert parsed.raw == {"message": "Email já cadastrado", "field": "email"}
        assert ApiErrorBody(message="x").raw == {}
        assert ApiErrorBody(message="x").raw is not ApiErrorBody(message="y").raw

    def test_error_key_fallback(self) -> None:
        assert parse_error_body({"error": "boom"}).message == "boom"

    def test_non_dict(self) -> None:
        assert parse_error_body(["x"]).message == GENERIC_ERROR_MESSAGE

    def test_marker_must_be_true(self) -> None:
        assert not is_account_disabled({"accountDisabled": "yes"})


class TestErrorHierarchy:
    def test_transport_family(self) -> None:
        assert issubclass(RequestAbortedError, RequestTimeoutError)
        assert issubclass(BackendNotReadyError, BackendUnreachableError)
        assert issubclass(BackendUnreachableError, TransportError)
        assert RequestTimeoutError().is_retryable


class TestRetryPolicy:
    def test_only_idempotent_methods(self) -> None:
        policy = RetryPolicy(max_retries=2)
        assert policy.should_retry("get", 0)
        assert policy.should_retry("GET", 1)
        assert not policy.should_retry("GET", 2)
        assert not policy.should_retry("POST", 0)

    def test_backoff_is_capped(self) -> None:
        policy = RetryPolicy(backoff_base_seconds=0.5, backoff_max_seconds=1.5)
        assert [policy.backoff_for(a) for a in range(3)] == [0.5, 1.0, 1.5]


class TestNotificationEnvelope:
    def test_ignores_unknown_fields(self) -> None:
        envelope = NotificationEnvelope.model_validate({"type": "ping", "extra": 1})
        assert envelope.type == "ping"

    def test_type_is_required(self) -> None:
        with pytest.raises(ValidationError):
            NotificationEnvelope.model_validate({"type": ""})
