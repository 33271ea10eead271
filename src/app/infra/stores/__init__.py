"""Implementações do armazenamento da sessão."""

from app.infra.stores.memory_stores import MemoryKeyValueStore, SharedMemoryBacking
from app.infra.stores.redis_kv_store import KV_PREFIX, RedisKeyValueStore

__all__ = [
    "KV_PREFIX",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "SharedMemoryBacking",
]
