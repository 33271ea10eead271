"""
Exports públicos do módulo fsm/transitions.

Regras de transição válidas entre estados.
"""

from fsm.transitions.rules import (
    CONNECTION_TRANSITIONS,
    READINESS_TRANSITIONS,
    VALID_TRANSITIONS,
    TransitionMap,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)

__all__ = [
    "CONNECTION_TRANSITIONS",
    "READINESS_TRANSITIONS",
    "VALID_TRANSITIONS",
    "TransitionMap",
    "get_valid_targets",
    "is_transition_valid",
    "validate_transition_map",
]
