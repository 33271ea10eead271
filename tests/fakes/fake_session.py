"""Sessão falsa que registra invalidações."""

from __future__ import annotations

from app.events.models import InvalidationReason


class FakeSession:
    """Implementa SessionProtocol com um token fixo e mutável."""

    def __init__(self, token: str | None = "token-123") -> None:
        self.token = token
        self.invalidations: list[tuple[str, str | None]] = []

    def current_token(self) -> str | None:
        return self.token

    def invalidate(
        self,
        reason: str = InvalidationReason.SESSION_EXPIRED,
        message: str | None = None,
    ) -> bool:
        had_session = self.token is not None
        self.invalidations.append((str(reason), message))
        self.token = None
        return had_session
