"""Logging JSON do cliente MediBill.

Um único StreamHandler no root com formatter JSON, CorrelationIdFilter
(correlation_id, service) e SensitiveDataFilter (token, senha, token da
URL SSE). A flag de debug das settings força DEBUG.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização do cliente (app.bootstrap)
    configure_logging(level="INFO", service_name="medibill_client")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("backend_request_ok", extra={"latency_ms": 42})

Nomes de evento em snake_case; dados pessoais nunca vão para extra.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter, SensitiveDataFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

    from config.settings import BaseSettings

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "medibill_client"

# httpx loga a URL completa de cada request em INFO (inclusive ?token= do SSE)
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    environment: str | None = None,
) -> None:
    """Instala o handler JSON único no root logger.

    Chamada uma vez por processo (app.bootstrap); chamadas seguintes
    substituem o handler anterior.

    Args:
        level: DEBUG, INFO, WARNING, ERROR ou CRITICAL (case insensitive).
        service_name: Valor do campo `service`.
        correlation_id_getter: Lê o correlation id do contexto atual.
        environment: Campo fixo `environment` em toda linha (se informado).

    Raises:
        ValueError: Nível desconhecido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter(environment))
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(SensitiveDataFilter())

    root = logging.getLogger()
    root.setLevel(level_upper)
    root.handlers = [handler]

    quiet_level = max(logging.WARNING, logging.getLevelNamesMapping()[level_upper])
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def configure_logging_from_settings(
    settings: BaseSettings,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging a partir de BaseSettings (debug força DEBUG)."""
    configure_logging(
        level=settings.effective_log_level,
        service_name=settings.service_name,
        correlation_id_getter=correlation_id_getter,
        environment=settings.environment,
    )


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado.

    O filter injeta automaticamente service e correlation_id.
    """
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log observável de fallback usado (sem PII).

    Útil para registrar quando um valor em cache/padrão foi devolvido
    no lugar da resposta do backend (ex: timeout, servidor indisponível).

    Args:
        logger: Logger instance.
        component: Nome do componente (ex: "sync_status").
        reason: Razão do fallback (ex: "timeout"), sem PII.
        elapsed_ms: Tempo decorrido em ms (quando aplicável).
    """
    extra: dict[str, object] = {
        "fallback_used": True,
        "component": component,
    }
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = elapsed_ms

    logger.info("fallback_applied", extra=extra)
