"""Testes do SessionManager.

Testa:
    - Restauração no cold start
    - Login/registro e persistência
    - Logout e invalidação (idempotentes)
    - Sincronização entre handles do storage ("abas")
    - Integração com o pipeline em um 401
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from api.connectors.backend import (
    ApiResponse,
    AuthenticationRequiredError,
    BackendHttpClient,
    HttpClientConfig,
)
from api.connectors.backend.errors import SESSION_EXPIRED_MESSAGE, ApiResponseError
from app.events import ClientEvent, ClientEventType, EventBus, InvalidationReason
from app.infra.stores import MemoryKeyValueStore
from app.sessions import SessionManager
from app.sessions.manager import INVALID_AUTH_RESPONSE_MESSAGE
from tests.fakes.fake_backend import BASE_URL, FakeBackend

USER = {"id": "u1", "name": "Ana", "role": "MANAGER", "branchId": "b1"}

# ──────────────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def events(bus: EventBus) -> list[ClientEvent]:
    received: list[ClientEvent] = []
    bus.subscribe_all(received.append)
    return received


@pytest.fixture
def http() -> AsyncMock:
    mock = AsyncMock()
    mock.request.return_value = ApiResponse(
        success=True,
        data={"token": "jwt-1", "user": USER},
        status_code=200,
    )
    return mock


@pytest.fixture
def manager(store: MemoryKeyValueStore, bus: EventBus, http: AsyncMock) -> SessionManager:
    return SessionManager(store, bus, http_client=http)


def _types(events: list[ClientEvent]) -> list[ClientEventType]:
    return [e.event_type for e in events]


# ──────────────────────────────────────────────────────────────────────────────
# Restauração
# ──────────────────────────────────────────────────────────────────────────────


class TestRestore:
    """Cold start a partir do storage."""

    def test_restores_valid_pair(self, store: MemoryKeyValueStore, manager: SessionManager) -> None:
        store.set("token", "jwt-1")
        store.set("medibill_user", json.dumps(USER))

        session = manager.restore()

        assert session.token == "jwt-1"
        assert session.user is not None
        assert session.user.branch_id == "b1"

    @pytest.mark.parametrize(
        "raw_user",
        ["not json", json.dumps({"name": "sem id"}), json.dumps({"id": "u1"})],
    )
    def test_invalid_user_clears_both_keys(
        self, store: MemoryKeyValueStore, manager: SessionManager, raw_user: str
    ) -> None:
        store.set("token", "jwt-1")
        store.set("medibill_user", raw_user)

        session = manager.restore()

        assert not session.is_authenticated
        assert store.get("token") is None
        assert store.get("medibill_user") is None

    def test_token_without_user_is_cleared(
        self, store: MemoryKeyValueStore, manager: SessionManager
    ) -> None:
        store.set("token", "jwt-1")
        assert not manager.restore().is_authenticated
        assert store.get("token") is None


# ──────────────────────────────────────────────────────────────────────────────
# Login e registro
# ──────────────────────────────────────────────────────────────────────────────


class TestLogin:
    """Autenticação e persistência."""

    @pytest.mark.asyncio
    async def test_login_persists_session(
        self,
        store: MemoryKeyValueStore,
        manager: SessionManager,
        http: AsyncMock,
        events: list[ClientEvent],
    ) -> None:
        response = await manager.login({"usernameOrEmail": "ana", "password": "x"})

        assert response.success
        http.request.assert_awaited_once_with(
            "/auth/login",
            method="POST",
            json={"usernameOrEmail": "ana", "password": "x"},
        )
        assert manager.current_token() == "jwt-1"
        assert manager.user is not None and manager.user.role == "MANAGER"
        assert store.get("token") == "jwt-1"
        assert json.loads(store.get("medibill_user"))["id"] == "u1"
        assert _types(events) == [ClientEventType.SESSION_STARTED]

    @pytest.mark.asyncio
    async def test_register_uses_register_path(
        self, manager: SessionManager, http: AsyncMock
    ) -> None:
        await manager.register({"username": "ana", "password": "x"})
        assert http.request.await_args.args[0] == "/auth/register"
        assert manager.is_authenticated

    @pytest.mark.asyncio
    async def test_rejected_credentials(
        self, store: MemoryKeyValueStore, manager: SessionManager, http: AsyncMock
    ) -> None:
        http.request.side_effect = ApiResponseError(
            "Invalid credentials", status_code=401, response={"message": "Invalid credentials"}
        )

        response = await manager.login({"usernameOrEmail": "ana", "password": "bad"})

        assert response.success is False
        assert response.message == "Invalid credentials"
        assert response.status_code == 401
        assert not manager.is_authenticated
        assert store.get("token") is None

    @pytest.mark.asyncio
    async def test_account_disabled_is_returned(
        self, manager: SessionManager, http: AsyncMock
    ) -> None:
        http.request.return_value = ApiResponse.disabled(
            {"message": "Account disabled", "accountDisabled": True}, 403
        )
        response = await manager.login({"usernameOrEmail": "ana", "password": "x"})
        assert response.account_disabled
        assert not manager.is_authenticated

    @pytest.mark.asyncio
    async def test_response_without_token(self, manager: SessionManager, http: AsyncMock) -> None:
        http.request.return_value = ApiResponse(success=True, data={"user": USER})
        response = await manager.login({"usernameOrEmail": "ana", "password": "x"})
        assert response.message == INVALID_AUTH_RESPONSE_MESSAGE
        assert not manager.is_authenticated

    @pytest.mark.asyncio
    async def test_login_requires_http_client(
        self, store: MemoryKeyValueStore, bus: EventBus
    ) -> None:
        with pytest.raises(RuntimeError):
            await SessionManager(store, bus).login({})


# ──────────────────────────────────────────────────────────────────────────────
# Logout e invalidação
# ──────────────────────────────────────────────────────────────────────────────


class TestLogoutAndInvalidate:
    """Encerramento local e invalidação sinalizada pelo servidor."""

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(
        self, store: MemoryKeyValueStore, manager: SessionManager, events: list[ClientEvent]
    ) -> None:
        await manager.login({"usernameOrEmail": "ana", "password": "x"})
        manager.logout()
        manager.logout()

        assert store.get("token") is None
        assert store.get("medibill_user") is None
        assert manager.current_token() is None
        assert _types(events).count(ClientEventType.SESSION_ENDED) == 1

    @pytest.mark.asyncio
    async def test_invalidate_once(
        self, manager: SessionManager, events: list[ClientEvent]
    ) -> None:
        await manager.login({"usernameOrEmail": "ana", "password": "x"})

        assert manager.invalidate(InvalidationReason.ACCOUNT_DEACTIVATED, "Disabled") is True
        assert manager.invalidate() is False

        auth_required = [e for e in events if e.event_type == ClientEventType.AUTH_REQUIRED]
        assert len(auth_required) == 1
        assert auth_required[0].reason == "account_deactivated"
        assert auth_required[0].message == "Disabled"
        assert not manager.is_authenticated

    def test_invalidate_default_message(
        self, store: MemoryKeyValueStore, manager: SessionManager, events: list[ClientEvent]
    ) -> None:
        store.set("token", "jwt-1")
        manager.invalidate()
        assert events[-1].message == SESSION_EXPIRED_MESSAGE
        assert events[-1].reason == "session_expired"


# ──────────────────────────────────────────────────────────────────────────────
# Storage compartilhado
# ──────────────────────────────────────────────────────────────────────────────


class TestStorageSync:
    """Mudanças feitas por outro handle do storage."""

    def test_current_token_rereads_store(
        self, store: MemoryKeyValueStore, bus: EventBus
    ) -> None:
        manager = SessionManager(store, bus)
        store.set("token", "jwt-late")
        assert manager.current_token() == "jwt-late"

    @pytest.mark.asyncio
    async def test_logout_elsewhere_ends_session(
        self,
        store: MemoryKeyValueStore,
        manager: SessionManager,
        events: list[ClientEvent],
    ) -> None:
        await manager.login({"usernameOrEmail": "ana", "password": "x"})
        other_tab = store.open_sibling()

        other_tab.remove("token")

        assert not manager.is_authenticated
        assert manager.user is None
        assert _types(events)[-1] == ClientEventType.SESSION_ENDED

    def test_login_elsewhere_is_mirrored(self, store: MemoryKeyValueStore, bus: EventBus) -> None:
        manager = SessionManager(store, bus)
        other_tab = store.open_sibling()

        other_tab.set("medibill_user", json.dumps(USER))
        other_tab.set("token", "jwt-2")

        assert manager.session.token == "jwt-2"
        assert manager.user is not None and manager.user.id == "u1"

    def test_close_stops_mirroring(self, store: MemoryKeyValueStore, bus: EventBus) -> None:
        manager = SessionManager(store, bus)
        manager.close()
        store.open_sibling().set("token", "jwt-2")
        assert manager.session.token is None


# ──────────────────────────────────────────────────────────────────────────────
# Permissões
# ──────────────────────────────────────────────────────────────────────────────


class TestPermissions:
    """Consultas de papel e permissão do usuário logado."""

    @pytest.mark.asyncio
    async def test_checks_use_current_user(self, manager: SessionManager) -> None:
        assert not manager.has_role("MANAGER")
        await manager.login({"usernameOrEmail": "ana", "password": "x"})
        assert manager.has_role("ADMIN", "MANAGER")
        assert manager.has_permission("products", "delete")
        assert not manager.has_permission("sales", "delete")
        assert manager.can_access("employees")
        assert not manager.can_access("billing")


# ──────────────────────────────────────────────────────────────────────────────
# Integração com o pipeline
# ──────────────────────────────────────────────────────────────────────────────


class TestPipelineIntegration:
    """401 em rota protegida limpa a sessão real e publica AUTH_REQUIRED."""

    @pytest.mark.asyncio
    async def test_401_clears_persisted_session(
        self, store: MemoryKeyValueStore, bus: EventBus, events: list[ClientEvent]
    ) -> None:
        backend = FakeBackend()
        backend.add(
            "POST",
            "/auth/login",
            json_body={"success": True, "data": {"token": "jwt-1", "user": USER}},
        )
        backend.add("GET", "/products", status=401, json_body={"message": "expired"})
        manager = SessionManager(store, bus)
        pipeline = BackendHttpClient(
            HttpClientConfig(base_url=BASE_URL, throttle_interval_seconds=0),
            session=manager,
            client=backend.client(),
        )
        manager.bind_http_client(pipeline)

        await manager.login({"usernameOrEmail": "ana", "password": "x"})
        with pytest.raises(AuthenticationRequiredError):
            await pipeline.request("/products")
        with pytest.raises(AuthenticationRequiredError):
            await pipeline.request("/products")

        assert store.get("token") is None
        assert _types(events).count(ClientEventType.AUTH_REQUIRED) == 1
        assert len(backend.calls("/products")) == 1

    @pytest.mark.asyncio
    async def test_login_non_json_error_is_returned(
        self, store: MemoryKeyValueStore, bus: EventBus, events: list[ClientEvent]
    ) -> None:
        """Proxy devolvendo 502 em texto: falha devolvida, nada persistido."""
        backend = FakeBackend()
        backend.add("POST", "/auth/login", status=502, text="Bad Gateway")
        manager = SessionManager(store, bus)
        manager.bind_http_client(
            BackendHttpClient(
                HttpClientConfig(base_url=BASE_URL, throttle_interval_seconds=0),
                session=manager,
                client=backend.client(),
            )
        )

        response = await manager.login({"usernameOrEmail": "ana", "password": "x"})

        assert response.success is False
        assert response.message == "Bad Gateway"
        assert response.status_code == 502
        assert not manager.is_authenticated
        assert store.get("token") is None
        assert events == []
