"""Testes do RedisKeyValueStore com mock."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.infra.stores import RedisKeyValueStore
from app.infra.stores.redis_kv_store import KV_PREFIX
from utils.errors import StoreConnectionError

CHANNEL = "medibill:storage-changes"


@pytest.fixture
def mock_redis() -> MagicMock:
    redis = MagicMock()
    redis.get.return_value = None
    return redis


class TestRedisKeyValueStore:
    """Leitura e escrita com namespace e aviso pub/sub."""

    def test_get_uses_prefix(self, mock_redis: MagicMock) -> None:
        mock_redis.get.return_value = "abc"
        store = RedisKeyValueStore(mock_redis, CHANNEL)
        assert store.get("token") == "abc"
        mock_redis.get.assert_called_once_with(f"{KV_PREFIX}token")

    def test_get_decodes_bytes(self, mock_redis: MagicMock) -> None:
        mock_redis.get.return_value = b"abc"
        store = RedisKeyValueStore(mock_redis, CHANNEL)
        assert store.get("token") == "abc"

    def test_set_writes_and_publishes(self, mock_redis: MagicMock) -> None:
        pipeline = mock_redis.pipeline.return_value
        store = RedisKeyValueStore(mock_redis, CHANNEL)

        store.set("token", "abc")

        pipeline.set.assert_called_once_with(f"{KV_PREFIX}token", "abc")
        channel, notice = pipeline.publish.call_args[0]
        assert channel == CHANNEL
        assert json.loads(notice)["key"] == "token"
        assert json.loads(notice)["value"] == "abc"
        pipeline.execute.assert_called_once()

    def test_remove_deletes_and_publishes(self, mock_redis: MagicMock) -> None:
        pipeline = mock_redis.pipeline.return_value
        store = RedisKeyValueStore(mock_redis, CHANNEL)

        store.remove("token")

        pipeline.delete.assert_called_once_with(f"{KV_PREFIX}token")
        assert json.loads(pipeline.publish.call_args[0][1])["value"] is None

    def test_redis_error_is_wrapped(self, mock_redis: MagicMock) -> None:
        mock_redis.get.side_effect = RedisConnectionError("down")
        store = RedisKeyValueStore(mock_redis, CHANNEL)
        with pytest.raises(StoreConnectionError):
            store.get("token")


class TestRedisChangeDispatch:
    """Entrega de avisos publicados por outros processos."""

    def _notice(self, origin: str, key: str, value: str | None) -> dict:
        return {"type": "message", "data": json.dumps({"origin": origin, "key": key, "value": value})}

    def test_dispatch_without_subscription(self, mock_redis: MagicMock) -> None:
        store = RedisKeyValueStore(mock_redis, CHANNEL)
        assert store.dispatch_pending_changes() == 0

    def test_dispatch_delivers_foreign_changes(self, mock_redis: MagicMock) -> None:
        pubsub = mock_redis.pubsub.return_value
        store = RedisKeyValueStore(mock_redis, CHANNEL)
        seen: list[tuple[str, str | None]] = []
        store.subscribe(lambda k, v: seen.append((k, v)))
        pubsub.subscribe.assert_called_once_with(CHANNEL)

        pubsub.get_message.side_effect = [
            self._notice("other-process", "token", None),
            {"type": "message", "data": "not json"},
            None,
        ]

        assert store.dispatch_pending_changes() == 1
        assert seen == [("token", None)]

    def test_dispatch_skips_own_notices(self, mock_redis: MagicMock) -> None:
        pipeline = mock_redis.pipeline.return_value
        pubsub = mock_redis.pubsub.return_value
        store = RedisKeyValueStore(mock_redis, CHANNEL)
        seen: list[str] = []
        store.subscribe(lambda k, v: seen.append(k))

        store.set("token", "abc")
        own_notice = pipeline.publish.call_args[0][1]
        pubsub.get_message.side_effect = [{"type": "message", "data": own_notice}, None]

        assert store.dispatch_pending_changes() == 0
        assert seen == []

    def test_close_releases_pubsub(self, mock_redis: MagicMock) -> None:
        pubsub = mock_redis.pubsub.return_value
        store = RedisKeyValueStore(mock_redis, CHANNEL)
        store.subscribe(lambda k, v: None)
        store.close()
        pubsub.close.assert_called_once()
        assert store.dispatch_pending_changes() == 0
