"""Probe de prontidão do backend embarcado.

Antes da primeira chamada protegida, o pipeline espera o backend local
responder em /health. Em modo remoto o probe não faz nada.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from api.connectors.backend.errors import BackendNotReadyError
from app.observability import record_readiness
from config.settings import BackendSettings
from fsm import ReadinessState, StateMachine, create_readiness_fsm

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class ReadinessConfig:
    """Limites do probe de prontidão."""

    base_url: str
    embedded: bool = False
    max_attempts: int = 30
    interval_seconds: float = 1.0
    probe_timeout_seconds: float = 5.0
    extra_attempts: int = 10
    extra_interval_seconds: float = 2.0

    @classmethod
    def from_settings(cls, settings: BackendSettings) -> ReadinessConfig:
        return cls(
            base_url=settings.base_url,
            embedded=settings.is_embedded,
            max_attempts=settings.readiness_max_attempts,
            interval_seconds=settings.readiness_interval_seconds,
            probe_timeout_seconds=settings.readiness_probe_timeout_seconds,
            extra_attempts=settings.readiness_extra_attempts,
            extra_interval_seconds=settings.readiness_extra_interval_seconds,
        )


def health_url_for(base_url: str) -> str:
    """Troca o sufixo /api da URL base por /health."""
    return base_url.replace("/api", "/health", 1)


class ReadinessProber:
    """Estado de prontidão (unknown/ready/not-ready) por instância de cliente.

    Chamadores concorrentes de ensure_ready() compartilham o mesmo probe.
    """

    def __init__(
        self,
        config: ReadinessConfig,
        client: httpx.AsyncClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._client = client
        self._clock = clock
        self._fsm: StateMachine = create_readiness_fsm()
        self._probe: asyncio.Task[bool] | None = None

    @property
    def state(self) -> ReadinessState:
        return ReadinessState(self._fsm.current_state)

    @property
    def is_ready(self) -> bool:
        return self.state == ReadinessState.READY

    async def check_health(self, base_url: str | None = None) -> bool:
        """Um único probe. Qualquer falha de transporte ou status não-2xx → False."""
        url = health_url_for(base_url or self._config.base_url)
        try:
            response = await self._client.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self._config.probe_timeout_seconds,
            )
        except httpx.TimeoutException:
            return False
        except httpx.HTTPError as exc:
            logger.debug("health_check_failed", extra={"error_type": type(exc).__name__})
            return False
        return response.is_success

    async def wait_for_ready(
        self,
        base_url: str | None = None,
        max_attempts: int | None = None,
        interval_seconds: float | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> bool:
        """Sequência limitada de probes; nunca levanta exceção.

        Dorme apenas entre tentativas, então N tentativas sem sucesso
        levam entre (N-1)·I e N·I.

        Returns:
            True no primeiro probe bem-sucedido, False ao esgotar o limite.
        """
        attempts = self._config.max_attempts if max_attempts is None else max_attempts
        interval = self._config.interval_seconds if interval_seconds is None else interval_seconds
        started = self._clock()

        for attempt in range(1, attempts + 1):
            if on_progress is not None:
                on_progress(attempt, attempts)
            if await self.check_health(base_url):
                elapsed_ms = (self._clock() - started) * 1000
                record_readiness(True, attempt, elapsed_ms)
                return True
            if attempt < attempts:
                await asyncio.sleep(interval)

        record_readiness(False, attempts, (self._clock() - started) * 1000)
        return False

    async def ensure_ready(self) -> None:
        """Garante que o backend embarcado está pronto antes de uma chamada.

        Raises:
            BackendNotReadyError: se o backend seguir inalcançável após
                o probe, o laço extra e a verificação final.
        """
        if self.is_ready:
            return
        if not self._config.embedded:
            self._mark(ReadinessState.READY, "remote_mode")
            return

        if self._probe is None:
            self._probe = asyncio.ensure_future(self.wait_for_ready())
        ready = await asyncio.shield(self._probe)

        if not ready:
            logger.info("readiness_extra_checks_started")
            ready = await self.wait_for_ready(
                max_attempts=self._config.extra_attempts,
                interval_seconds=self._config.extra_interval_seconds,
            )
        if not ready:
            ready = await self.check_health()

        if not ready:
            self._mark(ReadinessState.NOT_READY, "probe_exhausted")
            logger.error(
                "backend_not_ready",
                extra={"health_url": health_url_for(self._config.base_url)},
            )
            raise BackendNotReadyError()

        self._mark(ReadinessState.READY, "probe_ok")
        logger.info("backend_ready", extra={"base_url": self._config.base_url})

    def reset(self) -> None:
        """Volta para unknown e descarta o probe em cache (backend reiniciado)."""
        if self._probe is not None and not self._probe.done():
            self._probe.cancel()
        self._probe = None
        if self.state != ReadinessState.UNKNOWN:
            self._mark(ReadinessState.UNKNOWN, "reset")

    def _mark(self, target: ReadinessState, trigger: str) -> None:
        if self._fsm.current_state == target:
            return
        result = self._fsm.transition(target, trigger=trigger)
        if not result.success:
            logger.warning(
                "readiness_transition_rejected",
                extra={"reason": result.error_reason},
            )
