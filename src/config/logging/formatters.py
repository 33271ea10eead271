"""Formatter JSON (python-json-logger) das linhas de log do cliente.

Linha típica do pipeline HTTP:
    {"timestamp": "2026-10-17 10:30:00,120", "level": "DEBUG",
     "logger": "api.connectors.backend.request_logging",
     "message": "backend_request_ok", "correlation_id": "8f0c...",
     "service": "medibill_client", "environment": "production",
     "method": "GET", "path": "/products?page=1", "status_code": 200}

`extra={...}` dos módulos entra como campos de topo.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# correlation_id e service vêm do CorrelationIdFilter
REQUIRED_LOG_FIELDS = frozenset(
    {"asctime", "levelname", "name", "message", "correlation_id", "service"}
)

FIELD_RENAME_MAP = {
    "asctime": "timestamp",
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter(environment: str | None = None) -> JsonFormatter:
    """Formatter com os campos obrigatórios; `environment` vira campo fixo."""
    fmt = " ".join(f"%({name})s" for name in sorted(REQUIRED_LOG_FIELDS))
    static_fields = {"environment": environment} if environment else None
    return JsonFormatter(fmt, rename_fields=FIELD_RENAME_MAP, static_fields=static_fields)
