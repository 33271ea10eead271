"""Settings de sessão de autenticação.

Onde o token e o usuário logado são persistidos.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

SessionStoreBackend = Literal["memory", "redis"]

DEFAULT_TOKEN_KEY = "token"
DEFAULT_USER_KEY = "medibill_user"
DEFAULT_CHANGES_CHANNEL = "medibill:storage-changes"


@dataclass(frozen=True)
class SessionSettings:
    """Configurações de persistência da sessão.

    Attributes:
        store_backend: Backend do armazenamento chave-valor
        token_key: Chave do bearer token
        user_key: Chave do registro do usuário serializado
        redis_url: URL do Redis (apenas backend redis)
        changes_channel: Canal pub/sub para notificar mudanças entre processos
    """

    store_backend: SessionStoreBackend = "memory"
    token_key: str = DEFAULT_TOKEN_KEY
    user_key: str = DEFAULT_USER_KEY
    redis_url: str = ""
    changes_channel: str = DEFAULT_CHANGES_CHANNEL

    def validate(self) -> list[str]:
        """Valida configurações de sessão.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.store_backend not in ("memory", "redis"):
            errors.append(f"SESSION_STORE_BACKEND inválido: {self.store_backend}")

        if self.store_backend == "redis" and not self.redis_url:
            errors.append("REDIS_URL obrigatório quando SESSION_STORE_BACKEND=redis")

        if not self.token_key or not self.user_key:
            errors.append("Chaves de sessão não podem ser vazias")

        if self.token_key == self.user_key:
            errors.append("SESSION_TOKEN_KEY e SESSION_USER_KEY devem ser distintas")

        return errors


def _load_session_from_env() -> SessionSettings:
    """Carrega SessionSettings de variáveis de ambiente."""
    backend_str = os.getenv("SESSION_STORE_BACKEND", "memory").lower()
    backend: SessionStoreBackend = "redis" if backend_str == "redis" else "memory"
    return SessionSettings(
        store_backend=backend,
        token_key=os.getenv("SESSION_TOKEN_KEY", DEFAULT_TOKEN_KEY),
        user_key=os.getenv("SESSION_USER_KEY", DEFAULT_USER_KEY),
        redis_url=os.getenv("REDIS_URL", ""),
        changes_channel=os.getenv("SESSION_CHANGES_CHANNEL", DEFAULT_CHANGES_CHANNEL),
    )


@lru_cache(maxsize=1)
def get_session_settings() -> SessionSettings:
    """Retorna instância cacheada de SessionSettings."""
    return _load_session_from_env()
