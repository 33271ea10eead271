"""Coalescência e throttling de requisições por endpoint.

Chamadas concorrentes com a mesma chave (método, path, hash do corpo)
compartilham uma única tarefa. Chamadas sequenciais ao mesmo path são
espaçadas pelo intervalo mínimo, contado a partir do fim da anterior.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from app.observability import record_coalesced, record_throttle_wait

logger = logging.getLogger(__name__)

T = TypeVar("T")

CoalesceKey = tuple[str, str, str]

_EMPTY_BODY_HASH = hashlib.sha256(b"").hexdigest()


def coalesce_key(method: str, path: str, body: bytes | None = None) -> CoalesceKey:
    """Chave de coalescência: (MÉTODO, path com query, sha256 do corpo)."""
    digest = hashlib.sha256(body).hexdigest() if body else _EMPTY_BODY_HASH
    return method.upper(), path, digest


@dataclass(frozen=True)
class EndpointState:
    """Snapshot do estado de um path (observability/testes)."""

    path: str
    last_request_at: float | None
    in_flight: int


class RequestGate:
    """Mapa de requisições em voo e timestamps por path.

    Estado por instância: dois gates nunca interferem entre si.
    """

    def __init__(
        self,
        throttle_interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._interval = throttle_interval_seconds
        self._clock = clock
        self._last_request_at: dict[str, float] = {}
        self._in_flight: dict[CoalesceKey, asyncio.Task[Any]] = {}

    @property
    def throttle_interval_seconds(self) -> float:
        return self._interval

    async def run(
        self,
        method: str,
        path: str,
        body: bytes | None,
        call: Callable[[], Awaitable[T]],
    ) -> T:
        """Executa call() respeitando coalescência e throttling.

        Args:
            method: Método HTTP
            path: Path com query string
            body: Corpo serializado (entra no hash da chave)
            call: Fábrica da chamada de rede; só é invocada uma vez por chave em voo

        Returns:
            O mesmo resultado (ou exceção) para todos os chamadores coalescidos.
        """
        key = coalesce_key(method, path, body)
        task = self._in_flight.get(key)
        if task is not None:
            record_coalesced(key[0], path)
            return await asyncio.shield(task)

        task = asyncio.ensure_future(self._execute(key, path, call))
        self._in_flight[key] = task
        task.add_done_callback(_consume_exception)
        return await asyncio.shield(task)

    def endpoint_state(self, path: str) -> EndpointState:
        return EndpointState(
            path=path,
            last_request_at=self._last_request_at.get(path),
            in_flight=sum(1 for key in self._in_flight if key[1] == path),
        )

    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def _execute(
        self,
        key: CoalesceKey,
        path: str,
        call: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            await self._wait_throttle(path)
            return await call()
        finally:
            self._in_flight.pop(key, None)
            self._last_request_at[path] = self._clock()

    async def _wait_throttle(self, path: str) -> None:
        last = self._last_request_at.get(path)
        if last is None:
            return
        remaining = self._interval - (self._clock() - last)
        if remaining <= 0:
            return
        record_throttle_wait(path, remaining * 1000)
        await asyncio.sleep(remaining)


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # Evita "exception was never retrieved" quando todos os chamadores desistem
    if not task.cancelled():
        task.exception()
