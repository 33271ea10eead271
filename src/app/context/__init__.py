"""Escopo (empresa/filial) propagado implicitamente nas requisições."""

from app.context.scope import (
    BRANCH_HEADER,
    COMPANY_HEADER,
    Scope,
    ScopeAccessor,
    ScopeProvider,
)
from app.context.selection import ScopeSelection

__all__ = [
    "BRANCH_HEADER",
    "COMPANY_HEADER",
    "Scope",
    "ScopeAccessor",
    "ScopeProvider",
    "ScopeSelection",
]
