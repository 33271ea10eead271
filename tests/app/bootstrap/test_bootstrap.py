"""Testes do composition root (app.bootstrap)."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from api.connectors.backend import ReadinessProber
from app.bootstrap import (
    build_backend_client,
    create_key_value_store,
    initialize_test_app,
    validate_runtime_settings,
)
from app.events import ClientEventType
from app.infra.stores import MemoryKeyValueStore, RedisKeyValueStore
from config.settings import (
    BackendSettings,
    SessionSettings,
    get_backend_settings,
    get_base_settings,
    get_session_settings,
)
from fsm import ConnectionState
from tests.fakes.fake_backend import BASE_URL, FakeBackend

USER = {"id": "u1", "name": "Ana", "role": "ADMIN"}


@pytest.fixture
def settings() -> BackendSettings:
    return BackendSettings(base_url=BASE_URL, throttle_interval_seconds=0)


@pytest.fixture
def clear_settings_cache():
    for getter in (get_base_settings, get_backend_settings, get_session_settings):
        getter.cache_clear()
    yield
    for getter in (get_base_settings, get_backend_settings, get_session_settings):
        getter.cache_clear()


class TestCreateKeyValueStore:
    """Seleção do storage da sessão."""

    def test_memory(self) -> None:
        assert isinstance(create_key_value_store(SessionSettings()), MemoryKeyValueStore)

    def test_redis(self, monkeypatch: pytest.MonkeyPatch) -> None:
        redis_client = MagicMock()
        factory = MagicMock(return_value=redis_client)
        monkeypatch.setattr("app.bootstrap.dependencies.create_redis_client", factory)

        store = create_key_value_store(
            SessionSettings(store_backend="redis", redis_url="redis://localhost:6379/0")
        )

        assert isinstance(store, RedisKeyValueStore)
        factory.assert_called_once_with("redis://localhost:6379/0")


class TestBuildBackendClient:
    """Montagem completa de uma instância."""

    @pytest.mark.asyncio
    async def test_wiring_and_restore(self, settings: BackendSettings) -> None:
        store = MemoryKeyValueStore()
        store.set("token", "jwt-1")
        store.set("medibill_user", json.dumps(USER))
        backend = FakeBackend()

        async with build_backend_client(
            settings, SessionSettings(), store=store, http_client=backend.client()
        ) as client:
            assert client.session.current_token() == "jwt-1"
            assert isinstance(client.http.readiness, ReadinessProber)
            assert client.realtime.state == ConnectionState.DISCONNECTED
            assert client.store is store

    @pytest.mark.asyncio
    async def test_login_then_scoped_request(self, settings: BackendSettings) -> None:
        backend = FakeBackend()
        backend.add(
            "POST",
            "/auth/login",
            json_body={"success": True, "data": {"token": "jwt-9", "user": USER}},
        )
        backend.add("GET", "/products", json_body={"success": True, "data": [{"id": "p1"}]})
        client = build_backend_client(
            settings,
            SessionSettings(),
            store=MemoryKeyValueStore(),
            http_client=backend.client(),
        )
        started: list[str] = []
        client.events.subscribe(
            ClientEventType.SESSION_STARTED, lambda e: started.append(e.data["role"])
        )
        client.scope.set_accessor(lambda: {"companyId": "c-1", "branchId": "b-1"})

        await client.session.login({"usernameOrEmail": "ana", "password": "x"})
        response = await client.api.get_products(page=1)
        await client.aclose()

        assert response.data == [{"id": "p1"}]
        assert started == ["ADMIN"]
        request = backend.calls("/products")[0]
        assert request.url.params["page"] == "1"
        assert request.headers["authorization"] == "Bearer jwt-9"
        assert request.headers["x-branch-id"] == "b-1"

    @pytest.mark.asyncio
    async def test_instances_are_isolated(self, settings: BackendSettings) -> None:
        backend = FakeBackend()
        first_store = MemoryKeyValueStore()
        first_store.set("token", "jwt-a")
        first_store.set("medibill_user", json.dumps(USER))

        first = build_backend_client(
            settings, SessionSettings(), store=first_store, http_client=backend.client()
        )
        second = build_backend_client(
            settings,
            SessionSettings(),
            store=MemoryKeyValueStore(),
            http_client=backend.client(),
        )

        assert first.session.current_token() == "jwt-a"
        assert second.session.current_token() is None
        assert first.http.gate is not second.http.gate
        await first.aclose()
        await second.aclose()


class TestRuntimeValidation:
    """Validação das settings no startup."""

    def test_strict_in_production(
        self, monkeypatch: pytest.MonkeyPatch, clear_settings_cache: None
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("API_BASE_URL", "not-a-url")
        with pytest.raises(RuntimeError, match="Configuração inválida para production"):
            validate_runtime_settings()

    def test_lenient_in_development(
        self, monkeypatch: pytest.MonkeyPatch, clear_settings_cache: None
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("API_BASE_URL", "not-a-url")
        validate_runtime_settings()

    def test_initialize_test_app(self, clear_settings_cache: None) -> None:
        initialize_test_app()
        assert logging.getLogger().level == logging.DEBUG
