"""
Exports públicos do módulo fsm/manager.

Máquina de estados genérica e fábricas por domínio.
"""

from fsm.manager.machine import (
    INITIAL_STATES,
    StateMachine,
    create_connection_fsm,
    create_readiness_fsm,
)

__all__ = [
    "INITIAL_STATES",
    "StateMachine",
    "create_connection_fsm",
    "create_readiness_fsm",
]
