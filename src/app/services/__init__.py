"""Serviços de aplicação.

Unidades de orquestração sobre o conector do backend.
"""

from app.services.sync_status import (
    ConnectionInfo,
    SyncQueue,
    SyncStatus,
    SyncStatusMonitor,
)

__all__ = [
    "ConnectionInfo",
    "SyncQueue",
    "SyncStatus",
    "SyncStatusMonitor",
]
