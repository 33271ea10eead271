"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    InfrastructureError,
    StoreConnectionError,
)

__all__ = [
    "InfrastructureError",
    "StoreConnectionError",
]
