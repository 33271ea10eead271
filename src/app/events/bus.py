"""Barramento de eventos em processo (pub/sub que a UI observa)."""

from __future__ import annotations

import logging
from collections.abc import Callable

from app.events.models import ClientEvent, ClientEventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[ClientEvent], None]


class EventBus:
    """Pub/sub síncrono por tipo de evento.

    Um handler que falha é logado e não impede a entrega aos demais.
    """

    def __init__(self) -> None:
        self._subscribers: dict[ClientEventType, list[EventHandler]] = {}
        self._wildcard: list[EventHandler] = []

    def subscribe(
        self,
        event_type: ClientEventType,
        handler: EventHandler,
    ) -> Callable[[], None]:
        """Assina um tipo de evento; retorna função para cancelar."""
        handlers = self._subscribers.setdefault(event_type, [])
        handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def subscribe_all(self, handler: EventHandler) -> Callable[[], None]:
        """Assina todos os eventos (útil para logs e testes)."""
        self._wildcard.append(handler)

        def _unsubscribe() -> None:
            if handler in self._wildcard:
                self._wildcard.remove(handler)

        return _unsubscribe

    def publish(self, event: ClientEvent) -> None:
        """Entrega o evento a todos os assinantes do tipo e aos curingas."""
        handlers = [*self._subscribers.get(event.event_type, []), *self._wildcard]
        logger.debug("event_published", extra={**event.to_log_dict(), "handlers": len(handlers)})
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "event_handler_failed",
                    extra={"event_type": event.event_type.value},
                )

    def clear(self) -> None:
        """Remove todos os assinantes."""
        self._subscribers.clear()
        self._wildcard.clear()
