"""Erros e helpers de parsing para a API do backend.

Toda falha HTTP ou de transporte é convertida aqui em uma exceção
tipada; camadas acima não reinterpretam status codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Any

AUTH_REQUIRED_MESSAGE = "Authentication required. Please log in."
SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."
RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment and try again."
TIMEOUT_MESSAGE = (
    "Request timeout. The server may be starting up. Please wait a moment and try again."
)
UNREACHABLE_MESSAGE = (
    "Cannot connect to server. The backend may still be starting. "
    "Please wait a moment and try again."
)
ABORTED_MESSAGE = "Request aborted."
GENERIC_ERROR_MESSAGE = "An error occurred"

ACCOUNT_DISABLED_MARKER = "accountDisabled"


class BackendApiError(Exception):
    """Erro base da API do backend, sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_retryable = is_retryable


class AuthenticationRequiredError(BackendApiError):
    """Chamada protegida sem token, ou sessão invalidada pelo servidor (401)."""

    def __init__(
        self,
        message: str = AUTH_REQUIRED_MESSAGE,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.reason = reason


class RateLimitedError(BackendApiError):
    """HTTP 429. Nunca é retentado pelo pipeline."""

    def __init__(self, message: str = RATE_LIMITED_MESSAGE) -> None:
        super().__init__(message, status_code=429, is_retryable=True)


class ApiResponseError(BackendApiError):
    """Resposta não-2xx com corpo JSON.

    Attributes:
        field: Campo de formulário apontado pelo servidor (se houver)
        errors: Lista de erros de validação (se houver)
        response: Corpo JSON completo para quem precisar
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        field: str | None = None,
        errors: list[Any] | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message, status_code=status_code, is_retryable=status_code >= 500)
        self.field = field
        self.errors = errors
        self.response = response


class UnexpectedResponseError(BackendApiError):
    """Resposta não-2xx cujo corpo não é JSON."""


class TransportError(BackendApiError):
    """Falha antes de existir resposta HTTP."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None, is_retryable=True)


class RequestTimeoutError(TransportError):
    """Timeout da requisição."""

    def __init__(self, message: str = TIMEOUT_MESSAGE) -> None:
        super().__init__(message)


class RequestAbortedError(RequestTimeoutError):
    """Requisição cancelada pelo chamador (sinal externo)."""

    def __init__(self, message: str = ABORTED_MESSAGE) -> None:
        super().__init__(message)


class BackendUnreachableError(TransportError):
    """Falha de conexão ou DNS."""

    def __init__(self, message: str = UNREACHABLE_MESSAGE) -> None:
        super().__init__(message)


class BackendNotReadyError(BackendUnreachableError):
    """Backend embarcado não respondeu ao health check dentro dos limites."""


@dataclass(frozen=True)
class ApiErrorBody:
    """Campos de erro extraídos do corpo JSON de uma resposta."""

    message: str
    code: str | None = None
    field: str | None = None
    errors: list[Any] | None = None
    account_disabled: bool = False
    raw: dict[str, Any] = dc_field(default_factory=dict)


def is_account_disabled(body: Any) -> bool:
    """True quando o corpo carrega o marcador accountDisabled."""
    return isinstance(body, dict) and body.get(ACCOUNT_DISABLED_MARKER) is True


def parse_error_body(body: Any) -> ApiErrorBody:
    """Extrai informações de erro do corpo JSON do backend.

    Args:
        body: Corpo já decodificado (qualquer tipo JSON)

    Returns:
        ApiErrorBody com mensagem sempre preenchida
    """
    if not isinstance(body, dict):
        return ApiErrorBody(message=GENERIC_ERROR_MESSAGE)

    message = body.get("message") or body.get("error") or GENERIC_ERROR_MESSAGE
    errors = body.get("errors")
    code = body.get("code")
    field_name = body.get("field")

    return ApiErrorBody(
        message=str(message),
        code=str(code) if code else None,
        field=str(field_name) if field_name else None,
        errors=errors if isinstance(errors, list) else None,
        account_disabled=is_account_disabled(body),
        raw=body,
    )
