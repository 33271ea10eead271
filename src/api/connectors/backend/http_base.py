"""Configuração HTTP base e política de retry do cliente do backend."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


@dataclass(frozen=True)
class RetryPolicy:
    """Política única de retry aplicada pelo pipeline.

    Só falhas de transporte de métodos idempotentes são retentadas.
    Status HTTP (inclusive 429 e 5xx) nunca são.
    """

    max_retries: int = 2
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 8.0
    retry_methods: frozenset[str] = IDEMPOTENT_METHODS

    def should_retry(self, method: str, attempt: int) -> bool:
        return method.upper() in self.retry_methods and attempt < self.max_retries

    def backoff_for(self, attempt: int) -> float:
        return min((2**attempt) * self.backoff_base_seconds, self.backoff_max_seconds)


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    base_url: str
    timeout_seconds: float = 30.0
    throttle_interval_seconds: float = 1.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    default_headers: dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )
    verify_ssl: bool = True


async def _backoff_sleep(attempt: int, policy: RetryPolicy) -> None:
    backoff = policy.backoff_for(attempt)
    logger.info("http_backoff", extra={"backoff_seconds": backoff, "attempt": attempt})
    await asyncio.sleep(backoff)
