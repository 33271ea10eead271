"""Helpers de logging para chamadas ao backend (sem tokens nem PII)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .errors import ApiErrorBody

logger = logging.getLogger(__name__)


def log_api_error(
    error_body: ApiErrorBody,
    method: str,
    path: str,
    status_code: int,
) -> None:
    """Loga erro do backend sem expor o corpo da resposta."""
    logger.warning(
        "backend_api_error",
        extra={
            "method": method,
            "path": path,
            "status_code": status_code,
            "error_code": error_body.code,
            "error_field": error_body.field,
            "account_disabled": error_body.account_disabled,
        },
    )


def log_transport_error(method: str, path: str, error_type: str, attempt: int) -> None:
    """Loga falha de transporte (timeout, conexão)."""
    logger.warning(
        "backend_transport_error",
        extra={
            "method": method,
            "path": path,
            "error_type": error_type,
            "attempt": attempt,
        },
    )


def log_success(
    method: str,
    path: str,
    status_code: int,
) -> None:
    """Loga sucesso sem expor dados sensíveis."""
    logger.debug(
        "backend_request_ok",
        extra={
            "method": method,
            "path": path,
            "status_code": status_code,
        },
    )
