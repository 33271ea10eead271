"""Wiring do cliente do backend: store, sessão, pipeline e canais."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from api.connectors.backend import (
    BackendApi,
    BackendHttpClient,
    RealtimeChannel,
    create_backend_http_client,
    create_realtime_channel,
)
from app.bootstrap.clients import create_redis_client
from app.context import ScopeProvider
from app.events import EventBus
from app.infra.stores import MemoryKeyValueStore, RedisKeyValueStore
from app.services.sync_status import SyncStatusMonitor
from app.sessions import SessionManager
from config.settings import (
    BackendSettings,
    SessionSettings,
    get_backend_settings,
    get_session_settings,
)

if TYPE_CHECKING:
    import httpx

    from app.protocols.key_value_store import KeyValueStoreProtocol

logger = logging.getLogger(__name__)


def create_key_value_store(settings: SessionSettings | None = None) -> KeyValueStoreProtocol:
    """Cria o storage da sessão baseado na configuração."""
    session_settings = settings or get_session_settings()
    backend = session_settings.store_backend

    if backend == "redis":
        store = RedisKeyValueStore(
            create_redis_client(session_settings.redis_url),
            session_settings.changes_channel,
        )
        logger.info("kv_store_created", extra={"backend": "redis"})
        return store

    if backend == "memory":
        logger.info("kv_store_created", extra={"backend": "memory"})
        return MemoryKeyValueStore()

    msg = f"SESSION_STORE_BACKEND inválido: {backend}"
    raise ValueError(msg)


@dataclass
class BackendClient:
    """Conjunto de componentes de uma instância do cliente.

    Cada instância tem seu próprio estado (token, gate, prontidão);
    duas instâncias nunca interferem.
    """

    settings: BackendSettings
    store: KeyValueStoreProtocol
    events: EventBus
    session: SessionManager
    scope: ScopeProvider
    http: BackendHttpClient
    api: BackendApi
    realtime: RealtimeChannel
    sync: SyncStatusMonitor

    async def aclose(self) -> None:
        """Fecha canal realtime, polling, assinaturas e o cliente HTTP."""
        await self.realtime.close()
        self.realtime.dispose()
        await self.sync.stop_polling()
        self.session.close()
        await self.http.aclose()

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def build_backend_client(
    settings: BackendSettings | None = None,
    session_settings: SessionSettings | None = None,
    store: KeyValueStoreProtocol | None = None,
    http_client: httpx.AsyncClient | None = None,
    restore_session: bool = True,
) -> BackendClient:
    """Monta um BackendClient completo.

    Args:
        settings: BackendSettings (ambiente se None)
        session_settings: SessionSettings (ambiente se None)
        store: Storage já criado (ex: handle compartilhado em testes)
        http_client: httpx.AsyncClient injetável
        restore_session: Restaura o par token/usuário persistido

    Returns:
        BackendClient pronto para uso.
    """
    backend = settings or get_backend_settings()
    session_cfg = session_settings or get_session_settings()
    kv_store = store or create_key_value_store(session_cfg)

    events = EventBus()
    session = SessionManager(
        kv_store,
        events,
        token_key=session_cfg.token_key,
        user_key=session_cfg.user_key,
    )
    if restore_session:
        session.restore()

    scope = ScopeProvider()
    http = create_backend_http_client(backend, session=session, scope=scope, client=http_client)
    session.bind_http_client(http)
    api = BackendApi(http)

    client = BackendClient(
        settings=backend,
        store=kv_store,
        events=events,
        session=session,
        scope=scope,
        http=http,
        api=api,
        realtime=create_realtime_channel(http.http, session, events, backend),
        sync=SyncStatusMonitor(api),
    )
    logger.info(
        "backend_client_built",
        extra={"backend_mode": backend.backend_mode, "store_backend": session_cfg.store_backend},
    )
    return client
