"""
Regras de transição válidas dos estados do cliente.

Um mapa por enum: canal realtime e prontidão do backend.
"""

from enum import StrEnum

from fsm.states.connection import ConnectionState
from fsm.states.readiness import ReadinessState

# Tipagem explícita do mapa de transições
TransitionMap = dict[StrEnum, frozenset[StrEnum]]

# Canal realtime
CONNECTION_TRANSITIONS: TransitionMap = {
    ConnectionState.DISCONNECTED: frozenset({
        ConnectionState.CONNECTING,
    }),
    ConnectionState.CONNECTING: frozenset({
        ConnectionState.CONNECTED,
        ConnectionState.RECONNECT_PENDING,
        ConnectionState.DISCONNECTED,
    }),
    ConnectionState.CONNECTED: frozenset({
        ConnectionState.RECONNECT_PENDING,
        ConnectionState.DISCONNECTED,
    }),
    ConnectionState.RECONNECT_PENDING: frozenset({
        ConnectionState.CONNECTING,
        ConnectionState.DISCONNECTED,
    }),
}

# Prontidão do backend
READINESS_TRANSITIONS: TransitionMap = {
    ReadinessState.UNKNOWN: frozenset({
        ReadinessState.READY,
        ReadinessState.NOT_READY,
    }),
    ReadinessState.NOT_READY: frozenset({
        ReadinessState.READY,
        ReadinessState.UNKNOWN,
    }),
    # READY só sai por reset explícito
    ReadinessState.READY: frozenset({
        ReadinessState.UNKNOWN,
    }),
}

VALID_TRANSITIONS: dict[type[StrEnum], TransitionMap] = {
    ConnectionState: CONNECTION_TRANSITIONS,
    ReadinessState: READINESS_TRANSITIONS,
}


def get_valid_targets(state: StrEnum) -> frozenset[StrEnum]:
    """
    Retorna os estados de destino válidos para um estado de origem.

    Args:
        state: Estado de origem (ConnectionState ou ReadinessState)

    Returns:
        Conjunto de estados de destino permitidos
    """
    transitions = VALID_TRANSITIONS.get(type(state), {})
    return transitions.get(state, frozenset())


def is_transition_valid(from_state: StrEnum, to_state: StrEnum) -> bool:
    """Verifica se uma transição é permitida pelas regras."""
    if type(from_state) is not type(to_state):
        return False
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade dos mapas de transição.

    Verifica:
    - Todos os estados de cada enum estão no seu mapa
    - Nenhuma transição aponta para estado de outro enum

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for enum_type, transitions in VALID_TRANSITIONS.items():
        for state in enum_type:
            if state not in transitions:
                errors.append(f"Estado {state.name} ausente em {enum_type.__name__}")

        for from_state, targets in transitions.items():
            for target in targets:
                if not isinstance(target, enum_type):
                    errors.append(
                        f"Transição {from_state.name} → {target}: destino inválido"
                    )

    return errors
