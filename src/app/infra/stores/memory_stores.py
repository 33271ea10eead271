"""Store chave-valor em memória: durabilidade de página.

Vários handles podem compartilhar o mesmo backing dict (como abas que
compartilham o storage do navegador). Uma escrita feita por um handle é
notificada aos listeners dos outros handles, nunca aos do próprio.
"""

from __future__ import annotations

import logging

from app.protocols.key_value_store import (
    KeyValueStoreProtocol,
    StorageChangeListener,
    Unsubscribe,
)

logger = logging.getLogger(__name__)


class SharedMemoryBacking:
    """Backing compartilhado entre handles de MemoryKeyValueStore."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.handles: list[MemoryKeyValueStore] = []

    def notify_others(self, origin: MemoryKeyValueStore, key: str, value: str | None) -> None:
        """Entrega a mudança a todos os handles exceto o que escreveu."""
        for handle in list(self.handles):
            if handle is not origin:
                handle._dispatch(key, value)


class MemoryKeyValueStore(KeyValueStoreProtocol):
    """Store chave-valor em memória."""

    def __init__(self, backing: SharedMemoryBacking | None = None) -> None:
        self._backing = backing or SharedMemoryBacking()
        self._backing.handles.append(self)
        self._listeners: list[StorageChangeListener] = []

    @property
    def backing(self) -> SharedMemoryBacking:
        """Backing compartilhado (use para abrir outro handle)."""
        return self._backing

    def open_sibling(self) -> MemoryKeyValueStore:
        """Abre outro handle sobre o mesmo backing ("outra aba")."""
        return MemoryKeyValueStore(self._backing)

    def get(self, key: str) -> str | None:
        return self._backing.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._backing.data.get(key) == value:
            return
        self._backing.data[key] = value
        self._backing.notify_others(self, key, value)

    def remove(self, key: str) -> None:
        if key not in self._backing.data:
            return
        del self._backing.data[key]
        self._backing.notify_others(self, key, None)

    def subscribe(self, listener: StorageChangeListener) -> Unsubscribe:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        """Desliga o handle do backing compartilhado."""
        if self in self._backing.handles:
            self._backing.handles.remove(self)
        self._listeners.clear()

    def _dispatch(self, key: str, value: str | None) -> None:
        for listener in list(self._listeners):
            listener(key, value)
        logger.debug(
            "storage_change_dispatched",
            extra={"key": key, "removed": value is None, "listeners": len(self._listeners)},
        )
