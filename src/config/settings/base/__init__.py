"""Settings comuns: ambiente/logging (core) e persistência da sessão."""

from __future__ import annotations

from config.settings.base.core import (
    VALID_LOG_LEVELS,
    BaseSettings,
    Environment,
    get_base_settings,
    parse_bool,
    parse_environment,
)
from config.settings.base.session import (
    SessionSettings,
    SessionStoreBackend,
    get_session_settings,
)

__all__ = [
    "VALID_LOG_LEVELS",
    "BaseSettings",
    "Environment",
    "SessionSettings",
    "SessionStoreBackend",
    "get_base_settings",
    "get_session_settings",
    "parse_bool",
    "parse_environment",
]
