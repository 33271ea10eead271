"""Eventos publicados pelo cliente para a UI observar."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ClientEventType(StrEnum):
    """Tipos de evento do barramento do cliente."""

    # Sessão
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    AUTH_REQUIRED = "auth_required"

    # Estado da conta (canal realtime)
    ACCOUNT_DEACTIVATED = "account_deactivated"
    ACCOUNT_REACTIVATED = "account_reactivated"

    # Mudanças de dados (canal realtime)
    DATA_CHANGED = "data_changed"

    # Canal realtime
    REALTIME_STATE_CHANGED = "realtime_state_changed"

    def __str__(self) -> str:
        return self.value


class InvalidationReason(StrEnum):
    """Motivo de uma invalidação de sessão sinalizada pelo servidor."""

    SESSION_EXPIRED = "session_expired"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    SESSION_EXPIRED_ANOTHER_DEVICE = "session_expired_another_device"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ClientEvent:
    """Evento imutável entregue aos assinantes.

    Attributes:
        event_type: Tipo do evento
        message: Texto para a UI (quando houver)
        reason: Motivo (ex: InvalidationReason em AUTH_REQUIRED)
        data: Payload adicional (ex: entidade/ação em DATA_CHANGED)
        occurred_at: Momento da publicação (UTC)
    """

    event_type: ClientEventType
    message: str | None = None
    reason: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_log_dict(self) -> dict[str, Any]:
        """Representação segura para logs (sem payload)."""
        return {
            "event_type": self.event_type.value,
            "reason": self.reason,
            "occurred_at": self.occurred_at.isoformat(),
        }
