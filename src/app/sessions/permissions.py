"""Tabelas de permissão por papel.

Hierarquia simples: uma ação "manage" cobre todas as outras do recurso.
"""

from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    CASHIER = "CASHIER"
    PRODUCT_OWNER = "PRODUCT_OWNER"

    def __str__(self) -> str:
        return self.value


MANAGE = "manage"

ROLE_PERMISSIONS: dict[UserRole, dict[str, frozenset[str]]] = {
    UserRole.PRODUCT_OWNER: {
        "users": frozenset({MANAGE}),
        "branches": frozenset({MANAGE}),
        "settings": frozenset({MANAGE}),
        "integrations": frozenset({MANAGE}),
        "backup": frozenset({MANAGE}),
        "analytics": frozenset({"read"}),
        "billing": frozenset({MANAGE}),
    },
    UserRole.SUPERADMIN: {
        "users": frozenset({MANAGE}),
        "employees": frozenset({MANAGE}),
        "branches": frozenset({MANAGE}),
        "products": frozenset({MANAGE}),
        "categories": frozenset({MANAGE}),
        "suppliers": frozenset({MANAGE}),
        "sales": frozenset({MANAGE}),
        "reports": frozenset({MANAGE}),
        "dashboard": frozenset({"read"}),
        "settings": frozenset({MANAGE}),
        "integrations": frozenset({MANAGE}),
        "backup": frozenset({MANAGE}),
        "commissions": frozenset({MANAGE}),
        "customers": frozenset({MANAGE}),
        "refunds": frozenset({MANAGE}),
    },
    UserRole.ADMIN: {
        "users": frozenset({"create", "read", "update"}),
        "employees": frozenset({MANAGE}),
        "products": frozenset({MANAGE}),
        "categories": frozenset({MANAGE}),
        "suppliers": frozenset({MANAGE}),
        "sales": frozenset({MANAGE}),
        "reports": frozenset({"read", "export"}),
        "dashboard": frozenset({"read"}),
        "refunds": frozenset({MANAGE}),
        "customers": frozenset({MANAGE}),
        "commissions": frozenset({"read"}),
        "settings": frozenset({"read"}),
        "invoices": frozenset({"read", "create", "update"}),
        "branches": frozenset({MANAGE}),
        "subscription": frozenset({"read", MANAGE}),
    },
    UserRole.MANAGER: {
        "users": frozenset({"create", "read", "update"}),
        "employees": frozenset({MANAGE}),
        "products": frozenset({MANAGE}),
        "categories": frozenset({MANAGE}),
        "suppliers": frozenset({MANAGE}),
        "sales": frozenset({"create", "read", "update"}),
        "reports": frozenset({"read", "export"}),
        "dashboard": frozenset({"read"}),
        "refunds": frozenset({"read", "approve", "reject"}),
        "customers": frozenset({MANAGE}),
        "commissions": frozenset({"read"}),
        "settings": frozenset({"read"}),
        "invoices": frozenset({"read", "create", "update"}),
    },
    UserRole.CASHIER: {
        "sales": frozenset({"create", "read"}),
        "receipts": frozenset({"create", "read"}),
        "refunds": frozenset({"create", "read"}),
        "products": frozenset({"read"}),
        "customers": frozenset({"read", "create", "update"}),
        "categories": frozenset({"read"}),
        "dashboard": frozenset({"read"}),
        "reports": frozenset({"read"}),
        "invoices": frozenset({"read"}),
    },
}

ACCESSIBLE_RESOURCES: dict[UserRole, frozenset[str]] = {
    UserRole.PRODUCT_OWNER: frozenset({
        "users", "branches", "settings", "integrations", "backup", "analytics", "billing",
    }),
    UserRole.SUPERADMIN: frozenset({
        "users", "employees", "branches", "products", "categories", "suppliers",
        "sales", "reports", "dashboard", "settings", "integrations", "backup",
        "commissions", "customers", "refunds", "invoices", "admin_payments",
        "admin_management",
    }),
    UserRole.ADMIN: frozenset({
        "users", "employees", "branches", "products", "categories", "suppliers",
        "sales", "reports", "dashboard", "refunds", "customers", "commissions",
        "settings", "invoices", "subscription",
    }),
    UserRole.MANAGER: frozenset({
        "users", "employees", "products", "categories", "suppliers", "sales",
        "reports", "dashboard", "refunds", "customers", "commissions", "settings",
        "invoices",
    }),
    UserRole.CASHIER: frozenset({
        "sales", "receipts", "refunds", "products", "customers", "categories",
        "dashboard", "reports", "invoices",
    }),
}


def _as_role(role: str) -> UserRole | None:
    try:
        return UserRole(role)
    except ValueError:
        return None


def role_has_permission(role: str, resource: str, action: str) -> bool:
    """Papel tem a ação (ou "manage") sobre o recurso."""
    known = _as_role(role)
    if known is None:
        return False
    actions = ROLE_PERMISSIONS[known].get(resource, frozenset())
    return action in actions or MANAGE in actions


def role_can_access(role: str, resource: str) -> bool:
    known = _as_role(role)
    if known is None:
        return False
    return resource in ACCESSIBLE_RESOURCES[known]
