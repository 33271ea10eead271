"""Correlation id por tarefa asyncio.

Quando presente, segue no header X-Correlation-ID e no campo
correlation_id dos logs. Sem valor ligado, nenhum header é enviado.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("medibill_correlation_id", default="")


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Valor ligado ao contexto atual ("" se nenhum)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Liga um id (gerado se None) e devolve o token para reset."""
    return _correlation_id.set(correlation_id or generate_correlation_id())


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Liga um correlation id durante o bloco.

    Uso:
        with correlation_scope() as cid:
            await api.get_products()
    """
    token = set_correlation_id(correlation_id)
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)
