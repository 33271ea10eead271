"""
Módulo FSM: máquinas de estado do cliente.

Estrutura:
    - states/: ConnectionState (canal realtime) e ReadinessState (backend)
    - transitions/: Mapas de transições válidas
    - manager/: StateMachine e fábricas
    - types/: StateTransition, TransitionResult
"""

from fsm.manager import (
    INITIAL_STATES,
    StateMachine,
    create_connection_fsm,
    create_readiness_fsm,
)
from fsm.states import (
    ACTIVE_CONNECTION_STATES,
    DEFAULT_CONNECTION_STATE,
    DEFAULT_READINESS_STATE,
    ConnectionState,
    ReadinessState,
    is_active,
)
from fsm.transitions import (
    CONNECTION_TRANSITIONS,
    READINESS_TRANSITIONS,
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "ACTIVE_CONNECTION_STATES",
    "CONNECTION_TRANSITIONS",
    "DEFAULT_CONNECTION_STATE",
    "DEFAULT_READINESS_STATE",
    "INITIAL_STATES",
    "READINESS_TRANSITIONS",
    "VALID_TRANSITIONS",
    # Estados
    "ConnectionState",
    "ReadinessState",
    # Manager
    "StateMachine",
    # Types
    "StateTransition",
    "TransitionResult",
    "create_connection_fsm",
    "create_readiness_fsm",
    "get_valid_targets",
    "is_active",
    "is_transition_valid",
    "validate_transition_map",
]
