"""Registro de métricas via structured logging.

As métricas são logs estruturados (metric_type + campos) que podem ser
agregados depois por qualquer coletor de logs.

Métricas suportadas:
- Latência: tempo de cada chamada ao backend por método/path
- Throttle: espera imposta pelo intervalo mínimo por endpoint
- Coalescing: chamadas que reaproveitaram uma requisição em voo
- Readiness: resultado do handshake com o backend
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
    status_code: int | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "backend_http")
        operation: Nome da operação (ex: "GET /products")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
        status_code: Status HTTP (quando houver resposta)
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "status_code": status_code,
            "correlation_id": correlation_id,
        },
    )


def record_throttle_wait(path: str, wait_ms: float) -> None:
    """Registra espera imposta pelo throttling de um endpoint."""
    logger.debug(
        "metric_throttle_wait",
        extra={
            "metric_type": "throttle_wait",
            "component": "request_gate",
            "endpoint": path,
            "wait_ms": round(wait_ms, 2),
        },
    )


def record_coalesced(method: str, path: str) -> None:
    """Registra chamada atendida por uma requisição já em voo."""
    logger.debug(
        "metric_coalesced",
        extra={
            "metric_type": "coalesced",
            "component": "request_gate",
            "method": method,
            "endpoint": path,
        },
    )


def record_readiness(ready: bool, attempts: int, elapsed_ms: float) -> None:
    """Registra o resultado de um laço de readiness."""
    logger.info(
        "metric_readiness",
        extra={
            "metric_type": "readiness",
            "component": "readiness_prober",
            "ready": ready,
            "attempts": attempts,
            "elapsed_ms": round(elapsed_ms, 2),
        },
    )
