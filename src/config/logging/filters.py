"""Filters de logging do cliente.

CorrelationIdFilter liga cada record à chamada ao backend que o gerou
(correlation_id, service). SensitiveDataFilter mascara bearer token,
senha e o token da URL do stream SSE antes da serialização JSON.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

REDACTED = "[REDACTED]"

# atributos de record (vindos de extra=) que nunca podem sair em claro
SENSITIVE_ATTRIBUTES = frozenset(
    {"token", "authorization", "password", "new_password", "current_password"}
)

_QUERY_TOKEN = re.compile(r"([?&]token=)[^&\s]+")
_BEARER = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)


def redact_text(text: str) -> str:
    """Mascara `?token=...` e `Bearer ...` em texto livre."""
    return _BEARER.sub(rf"\1{REDACTED}", _QUERY_TOKEN.sub(rf"\1{REDACTED}", text))


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record.

    Um correlation_id passado via `extra` tem precedência sobre o getter.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service = service_name
        self._correlation = correlation_id_getter

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = self._correlation() if self._correlation else ""
        record.service = self._service
        return True


class SensitiveDataFilter(logging.Filter):
    """Mascara segredos em extras e em campos de URL do record."""

    def __init__(self, url_attributes: tuple[str, ...] = ("url", "path")) -> None:
        super().__init__()
        self._url_attributes = url_attributes

    def filter(self, record: logging.LogRecord) -> bool:
        for name in SENSITIVE_ATTRIBUTES:
            if getattr(record, name, None):
                setattr(record, name, REDACTED)
        for name in self._url_attributes:
            value = getattr(record, name, None)
            if isinstance(value, str):
                setattr(record, name, redact_text(value))
        return True
