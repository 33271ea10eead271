"""Observabilidade: correlation id e métricas via logs estruturados.

Uso:
    from app.observability import correlation_scope, get_correlation_id
    from app.observability import record_latency, record_throttle_wait
"""

from app.observability.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_coalesced,
    record_latency,
    record_readiness,
    record_throttle_wait,
)

__all__ = [
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "record_coalesced",
    "record_latency",
    "record_readiness",
    "record_throttle_wait",
    "reset_correlation_id",
    "set_correlation_id",
]
