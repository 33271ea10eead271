"""
Exports públicos do módulo fsm/states.

Estados do canal realtime e da prontidão do backend.
"""

from fsm.states.connection import (
    ACTIVE_CONNECTION_STATES,
    DEFAULT_CONNECTION_STATE,
    ConnectionState,
    is_active,
)
from fsm.states.readiness import DEFAULT_READINESS_STATE, ReadinessState

__all__ = [
    "ACTIVE_CONNECTION_STATES",
    "DEFAULT_CONNECTION_STATE",
    "DEFAULT_READINESS_STATE",
    "ConnectionState",
    "ReadinessState",
    "is_active",
]
