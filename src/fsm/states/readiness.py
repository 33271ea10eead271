"""
Estados de prontidão do backend.

UNKNOWN até o primeiro probe; READY é definitivo até um reset explícito
(ex: após detectar que o processo do backend reiniciou).
"""

from enum import StrEnum


class ReadinessState(StrEnum):
    """Estado tri-valorado do handshake de prontidão."""

    UNKNOWN = "UNKNOWN"
    READY = "READY"
    NOT_READY = "NOT_READY"

    def __str__(self) -> str:
        return self.value


DEFAULT_READINESS_STATE: ReadinessState = ReadinessState.UNKNOWN
