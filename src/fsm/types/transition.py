"""Registros imutáveis de transição de estado.

Alimentam o histórico das máquinas, os logs de debug e o payload do
evento REALTIME_STATE_CHANGED.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


@dataclass(frozen=True, slots=True)
class StateTransition:
    """Uma transição aceita pela máquina.

    Attributes:
        from_state: Estado de origem
        to_state: Estado de destino
        trigger: Gatilho (ex: 'stream_opened', 'probe_ok')
        metadata: Contexto extra, sem tokens
        timestamp: Instante UTC da transição
    """

    from_state: StrEnum
    to_state: StrEnum
    trigger: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.trigger.strip():
            raise ValueError("trigger obrigatório")

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "from_state": self.from_state.name,
            "to_state": self.to_state.name,
            "trigger": self.trigger,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }

    def to_event_data(self) -> dict[str, str]:
        """Payload publicado no EventBus (valores dos enums)."""
        return {
            "from": self.from_state.value,
            "to": self.to_state.value,
            "trigger": self.trigger,
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """Resultado de StateMachine.transition(): transição ou motivo da recusa."""

    success: bool
    transition: StateTransition | None = None
    error_reason: str | None = None

    def __post_init__(self) -> None:
        if self.success != (self.transition is not None):
            raise ValueError("transition presente se e somente se success")
        if not self.success and not self.error_reason:
            raise ValueError("recusa exige error_reason")

    @classmethod
    def ok(cls, transition: StateTransition) -> "TransitionResult":
        return cls(success=True, transition=transition)

    @classmethod
    def rejected(cls, reason: str) -> "TransitionResult":
        return cls(success=False, error_reason=reason)
