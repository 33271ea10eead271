"""Protocolo do armazenamento chave-valor onde a sessão é persistida.

Equivalente ao storage de página do front end: strings por chave, com
notificação de mudanças feitas por outro handle (outra aba/processo).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

# listener(key, new_value): new_value None significa remoção
StorageChangeListener = Callable[[str, str | None], None]
Unsubscribe = Callable[[], None]


class KeyValueStoreProtocol(ABC):
    """Contrato mínimo síncrono para o armazenamento da sessão.

    Operações são síncronas: o espelhamento memória/persistência do
    SessionManager acontece dentro de uma única atualização, sem await.
    """

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...

    @abstractmethod
    def subscribe(self, listener: StorageChangeListener) -> Unsubscribe:
        """Registra listener para mudanças feitas por outro handle.

        Args:
            listener: Chamado com (key, new_value) a cada mudança externa.

        Returns:
            Função que remove o listener.
        """
