"""Sessão autenticada: token, usuário e permissões por papel."""

from app.sessions.manager import SessionManager
from app.sessions.models import EMPTY_SESSION, Session, UserRecord
from app.sessions.permissions import (
    ACCESSIBLE_RESOURCES,
    ROLE_PERMISSIONS,
    UserRole,
    role_can_access,
    role_has_permission,
)

__all__ = [
    "ACCESSIBLE_RESOURCES",
    "EMPTY_SESSION",
    "ROLE_PERMISSIONS",
    "Session",
    "SessionManager",
    "UserRecord",
    "UserRole",
    "role_can_access",
    "role_has_permission",
]
