"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="medibill_client")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("backend_ready", extra={"attempts": 3})
"""

from config.logging.config import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    log_fallback,
)
from config.logging.filters import (
    REDACTED,
    CorrelationIdFilter,
    SensitiveDataFilter,
    redact_text,
)
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REDACTED",
    "REQUIRED_LOG_FIELDS",
    # Filters
    "CorrelationIdFilter",
    "SensitiveDataFilter",
    # Configuração principal
    "configure_logging",
    "configure_logging_from_settings",
    # Formatters
    "create_json_formatter",
    "get_logger",
    "log_fallback",
    "redact_text",
]
