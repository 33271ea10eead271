"""Protocolos e contratos do core da aplicação."""

from .http_client import BackendHttpClientProtocol
from .key_value_store import KeyValueStoreProtocol, StorageChangeListener, Unsubscribe
from .session_manager import SessionProtocol

__all__ = [
    "BackendHttpClientProtocol",
    "KeyValueStoreProtocol",
    "SessionProtocol",
    "StorageChangeListener",
    "Unsubscribe",
]
