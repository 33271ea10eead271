"""Monitor do status de sincronização SQLite/PostgreSQL do backend.

Falhas do backend nunca chegam ao chamador: o último status conhecido
(ou o padrão "offline/checking") é devolvido e o fallback é logado.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from api.connectors.backend.errors import BackendApiError
from app.observability import correlation_scope
from config.logging import log_fallback

if TYPE_CHECKING:
    from api.connectors.backend.endpoints import BackendApi

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 5.0


class ConnectionInfo(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: Literal["online", "offline", "checking", "error"] = "checking"
    type: Literal["sqlite", "postgresql"] = "sqlite"
    is_online: bool = Field(False, alias="isOnline")
    is_offline: bool = Field(True, alias="isOffline")


class SyncProgress(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    in_progress: bool = Field(False, alias="inProgress")
    last_sync: str | None = Field(None, alias="lastSync")
    pending_items: int = Field(0, alias="pendingItems")
    synced_items: int = Field(0, alias="syncedItems")
    failed_items: int = Field(0, alias="failedItems")
    current_operation: str | None = Field(None, alias="currentOperation")
    queue_items: int = Field(0, alias="queueItems")


class SyncStatus(BaseModel):
    """Status agregado devolvido por /sync/status."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    connection: ConnectionInfo = Field(default_factory=ConnectionInfo)
    sync: SyncProgress = Field(default_factory=SyncProgress)
    databases: dict[str, Any] = Field(
        default_factory=lambda: {
            "sqlite": {"connected": False, "path": ""},
            "postgresql": {"connected": False, "configured": False},
        }
    )


class SyncQueue(BaseModel):
    model_config = ConfigDict(extra="allow")

    queue: list[Any] = Field(default_factory=list)
    total: int = 0
    pending: int = 0
    synced: int = 0


StatusListener = Callable[[SyncStatus], None]


class SyncStatusMonitor:
    """Consulta, cacheia e distribui o status de sincronização."""

    def __init__(
        self,
        api: BackendApi,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._api = api
        self._poll_interval = poll_interval_seconds
        self._status: SyncStatus | None = None
        self._listeners: list[StatusListener] = []
        self._poll_task: asyncio.Task[None] | None = None

    @property
    def current_status(self) -> SyncStatus | None:
        """Último status obtido do backend (None se nunca obtido)."""
        return self._status

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def get_status(self) -> SyncStatus:
        """Busca /sync/status; em falha devolve o cache ou o padrão."""
        started = time.perf_counter()
        try:
            response = await self._api.get_sync_status()
            if response.success and response.data:
                self._status = SyncStatus.model_validate(response.data)
                self._notify()
                return self._status
            reason = "unsuccessful_response"
        except BackendApiError as exc:
            reason = type(exc).__name__
        except ValidationError:
            reason = "invalid_payload"

        log_fallback(
            logger,
            "sync_status",
            reason=reason,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )
        return self._status or SyncStatus()

    async def check_connectivity(self) -> ConnectionInfo:
        try:
            response = await self._api.check_connectivity()
            if response.success and response.data:
                return ConnectionInfo.model_validate(response.data)
            reason = "unsuccessful_response"
        except BackendApiError as exc:
            reason = type(exc).__name__
        except ValidationError:
            reason = "invalid_payload"
        log_fallback(logger, "sync_connectivity", reason=reason)
        return ConnectionInfo(status="error")

    async def sync_to_postgresql(self) -> tuple[bool, str]:
        return await self._trigger(self._api.sync_to_postgresql, "Failed to sync to PostgreSQL")

    async def sync_to_sqlite(self) -> tuple[bool, str]:
        return await self._trigger(self._api.sync_to_sqlite, "Failed to sync to SQLite")

    async def clear_queue(self) -> tuple[bool, str]:
        return await self._trigger(self._api.clear_sync_queue, "Failed to clear sync queue")

    async def get_queue(self) -> SyncQueue:
        try:
            response = await self._api.get_sync_queue()
            if response.success and response.data:
                return SyncQueue.model_validate(response.data)
            reason = "unsuccessful_response"
        except BackendApiError as exc:
            reason = type(exc).__name__
        except ValidationError:
            reason = "invalid_payload"
        log_fallback(logger, "sync_queue", reason=reason)
        return SyncQueue()

    def start_polling(self, interval_seconds: float | None = None) -> asyncio.Task[None]:
        """Busca imediatamente e depois a cada intervalo. Idempotente."""
        if self._poll_task is not None and not self._poll_task.done():
            return self._poll_task
        if interval_seconds is not None:
            self._poll_interval = interval_seconds
        self._poll_task = asyncio.ensure_future(self._poll())
        logger.info("sync_polling_started", extra={"interval_seconds": self._poll_interval})
        return self._poll_task

    async def stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("sync_polling_stopped")

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Assina atualizações; recebe o status atual de imediato, se houver."""
        self._listeners.append(listener)
        if self._status is not None:
            listener(self._status)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def _poll(self) -> None:
        while True:
            with correlation_scope():
                await self.get_status()
            await asyncio.sleep(self._poll_interval)

    async def _trigger(self, call: Callable[[], Any], failure_message: str) -> tuple[bool, str]:
        try:
            response = await call()
        except BackendApiError as exc:
            logger.warning("sync_trigger_failed", extra={"error_type": type(exc).__name__})
            return False, exc.message or failure_message
        return bool(response.success), response.message or ""

    def _notify(self) -> None:
        if self._status is None:
            return
        for listener in list(self._listeners):
            try:
                listener(self._status)
            except Exception:
                logger.exception("sync_status_listener_failed")
