"""Exceções de domínio para falhas recuperáveis de infraestrutura."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class StoreConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar o armazenamento da sessão."""
