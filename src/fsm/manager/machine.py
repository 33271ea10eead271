"""
Máquina de estados genérica para o canal realtime e a prontidão.

Valida cada transição contra o mapa do enum correspondente e mantém
histórico limitado para observabilidade.
"""

import logging
from enum import StrEnum
from typing import Any

from fsm.states.connection import DEFAULT_CONNECTION_STATE, ConnectionState
from fsm.states.readiness import DEFAULT_READINESS_STATE, ReadinessState
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 50


class StateMachine:
    """
    Máquina de estados determinística.

    Attributes:
        current_state: Estado atual da máquina
        history: Últimas transições realizadas
    """

    __slots__ = ("_current_state", "_history", "_initial_state", "_max_history", "_name")

    def __init__(
        self,
        initial_state: StrEnum,
        name: str = "",
        max_history: int = DEFAULT_MAX_HISTORY,
    ) -> None:
        """
        Inicializa a máquina de estados.

        Args:
            initial_state: Estado inicial
            name: Nome da máquina para logs (ex: 'realtime')
            max_history: Quantidade de transições mantidas no histórico
        """
        self._initial_state = initial_state
        self._current_state = initial_state
        self._history: list[StateTransition] = []
        self._max_history = max_history
        self._name = name

    @property
    def current_state(self) -> StrEnum:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def name(self) -> str:
        return self._name

    def can_transition_to(self, target: StrEnum) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        return is_transition_valid(self._current_state, target)

    def get_valid_targets(self) -> frozenset[StrEnum]:
        """Retorna estados de destino válidos a partir do estado atual."""
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: StrEnum,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho
            metadata: Dados adicionais para auditoria (nunca tokens)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_state, target):
            return TransitionResult.rejected(
                f"Transição inválida: {self._current_state.name} → {target.name}"
            )

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )

        self._current_state = target
        self._history.append(transition)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

        logger.debug(
            "state_transition",
            extra={"machine": self._name, **transition.to_log_dict()},
        )
        return TransitionResult.ok(transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual para observability."""
        return {
            "machine": self._name,
            "current_state": self._current_state.name,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.name for s in self.get_valid_targets()),
        }

    def reset(self) -> None:
        """
        Volta ao estado inicial sem validar o mapa.

        ATENÇÃO: Limpa todo o histórico.
        """
        self._current_state = self._initial_state
        self._history = []


def create_connection_fsm(name: str = "realtime") -> StateMachine:
    """Cria máquina do canal realtime em DISCONNECTED."""
    return StateMachine(initial_state=DEFAULT_CONNECTION_STATE, name=name)


def create_readiness_fsm(name: str = "readiness") -> StateMachine:
    """Cria máquina de prontidão em UNKNOWN."""
    return StateMachine(initial_state=DEFAULT_READINESS_STATE, name=name)


# Constantes re-exportadas para conveniência
INITIAL_STATES = frozenset({DEFAULT_CONNECTION_STATE, DEFAULT_READINESS_STATE})

__all__ = [
    "INITIAL_STATES",
    "ConnectionState",
    "ReadinessState",
    "StateMachine",
    "create_connection_fsm",
    "create_readiness_fsm",
]
