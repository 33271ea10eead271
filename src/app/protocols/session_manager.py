"""Protocolo da sessão consumido pelo pipeline e pelo canal realtime.

O pipeline só precisa ler o token e invalidar a sessão; o resto do
SessionManager não é visível para a camada api.
"""

from __future__ import annotations

from typing import Protocol


class SessionProtocol(Protocol):
    def current_token(self) -> str | None:
        """Token atual (relê o storage quando a memória está vazia)."""
        ...

    def invalidate(self, reason: str, message: str | None = None) -> bool:
        """Limpa a sessão; idempotente. Retorna True se havia sessão."""
        ...
