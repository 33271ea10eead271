"""Agregador de settings do cliente MediBill Pulse.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Backend settings
from config.settings.backend import (
    DEFAULT_BASE_URL,
    DEFAULT_REALTIME_PATH,
    HEALTH_PATH,
    BackendMode,
    BackendSettings,
    get_backend_settings,
)

# Base settings
from config.settings.base import (
    VALID_LOG_LEVELS,
    BaseSettings,
    Environment,
    SessionSettings,
    SessionStoreBackend,
    get_base_settings,
    get_session_settings,
    parse_bool,
)

__all__ = [
    # Constants
    "DEFAULT_BASE_URL",
    "DEFAULT_REALTIME_PATH",
    "HEALTH_PATH",
    "VALID_LOG_LEVELS",
    # Backend
    "BackendMode",
    "BackendSettings",
    # Base
    "BaseSettings",
    "Environment",
    "SessionSettings",
    "SessionStoreBackend",
    "get_backend_settings",
    "get_base_settings",
    "get_session_settings",
    "parse_bool",
]
