"""Eventos do cliente e barramento pub/sub."""

from app.events.bus import EventBus, EventHandler
from app.events.models import ClientEvent, ClientEventType, InvalidationReason

__all__ = [
    "ClientEvent",
    "ClientEventType",
    "EventBus",
    "EventHandler",
    "InvalidationReason",
]
