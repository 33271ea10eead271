"""Redis Key-Value Store: sessão compartilhada entre processos.

Alternativa ao store em memória quando mais de um processo do cliente
precisa enxergar o mesmo login (o "multi-aba" fora do navegador).
Cada escrita publica um aviso no canal pub/sub configurado; os outros
processos entregam esses avisos aos seus listeners via
dispatch_pending_changes().
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import TYPE_CHECKING, Any

from redis.exceptions import RedisError

from app.protocols.key_value_store import (
    KeyValueStoreProtocol,
    StorageChangeListener,
    Unsubscribe,
)
from utils.errors import StoreConnectionError

if TYPE_CHECKING:
    from redis import Redis
    from redis.client import PubSub

logger = logging.getLogger(__name__)

# Prefixo para namespace das chaves da sessão
KV_PREFIX = "medibill:kv:"


class RedisKeyValueStore(KeyValueStoreProtocol):
    """Store chave-valor usando Redis.

    Args:
        redis_client: Cliente Redis síncrono (decode_responses=True)
        changes_channel: Canal pub/sub onde mudanças são anunciadas
    """

    def __init__(self, redis_client: Redis, changes_channel: str) -> None:
        self._redis = redis_client
        self._channel = changes_channel
        self._origin = uuid.uuid4().hex
        self._listeners: list[StorageChangeListener] = []
        self._pubsub: PubSub | None = None

    def _key(self, key: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{KV_PREFIX}{key}"

    def get(self, key: str) -> str | None:
        try:
            value = self._redis.get(self._key(key))
        except RedisError as exc:
            raise StoreConnectionError("Falha ao ler chave no Redis") from exc
        if isinstance(value, bytes):
            return value.decode()
        return value

    def set(self, key: str, value: str) -> None:
        try:
            pipeline = self._redis.pipeline()
            pipeline.set(self._key(key), value)
            pipeline.publish(self._channel, self._notice(key, value))
            pipeline.execute()
        except RedisError as exc:
            raise StoreConnectionError("Falha ao gravar chave no Redis") from exc
        logger.debug("kv_store_set", extra={"key": key})

    def remove(self, key: str) -> None:
        try:
            pipeline = self._redis.pipeline()
            pipeline.delete(self._key(key))
            pipeline.publish(self._channel, self._notice(key, None))
            pipeline.execute()
        except RedisError as exc:
            raise StoreConnectionError("Falha ao remover chave no Redis") from exc
        logger.debug("kv_store_remove", extra={"key": key})

    def subscribe(self, listener: StorageChangeListener) -> Unsubscribe:
        if self._pubsub is None:
            try:
                self._pubsub = self._redis.pubsub(ignore_subscribe_messages=True)
                self._pubsub.subscribe(self._channel)
            except RedisError as exc:
                raise StoreConnectionError("Falha ao assinar canal no Redis") from exc
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispatch_pending_changes(self) -> int:
        """Entrega aos listeners os avisos publicados por outros processos.

        Returns:
            Quantidade de mudanças entregues.
        """
        if self._pubsub is None:
            return 0
        delivered = 0
        while True:
            try:
                message = self._pubsub.get_message(timeout=0)
            except RedisError as exc:
                raise StoreConnectionError("Falha ao ler canal no Redis") from exc
            if message is None:
                return delivered
            notice = self._parse_notice(message)
            if notice is None or notice.get("origin") == self._origin:
                continue
            for listener in list(self._listeners):
                listener(notice["key"], notice.get("value"))
            delivered += 1

    def close(self) -> None:
        """Encerra a assinatura pub/sub."""
        self._listeners.clear()
        if self._pubsub is not None:
            self._pubsub.close()
            self._pubsub = None

    def _notice(self, key: str, value: str | None) -> str:
        return json.dumps({"origin": self._origin, "key": key, "value": value})

    @staticmethod
    def _parse_notice(message: dict[str, Any]) -> dict[str, Any] | None:
        data = message.get("data")
        if isinstance(data, bytes):
            data = data.decode()
        if not isinstance(data, str):
            return None
        try:
            notice = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("kv_store_notice_invalid")
            return None
        if not isinstance(notice, dict) or "key" not in notice:
            return None
        return notice
