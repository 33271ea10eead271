"""Superfície tipada dos endpoints REST mais usados.

Cada método só monta path e query string; headers, token, escopo,
coalescência e classificação ficam no pipeline.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

if TYPE_CHECKING:
    from api.connectors.backend.models import ApiResponse
    from app.protocols.http_client import BackendHttpClientProtocol

_CAMEL_BOUNDARY = re.compile(r"_([a-z])")


def to_camel(name: str) -> str:
    """branch_id → branchId."""
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def build_query(params: dict[str, Any]) -> str:
    """Query string com chaves camelCase, sem valores None ou vazios."""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        pairs.append((to_camel(key), str(value)))
    return urlencode(pairs)


def with_query(path: str, params: dict[str, Any]) -> str:
    query = build_query(params)
    return f"{path}?{query}" if query else path


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class BackendApi:
    """Wrappers finos sobre BackendHttpClient.request()."""

    def __init__(self, http: BackendHttpClientProtocol) -> None:
        self._http = http

    # Auth
    async def get_profile(self) -> ApiResponse:
        return await self._http.request("/auth/profile")

    async def change_password(self, current_password: str, new_password: str) -> ApiResponse:
        return await self._http.request(
            "/auth/change-password",
            method="POST",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # Branches
    async def get_branches(self) -> ApiResponse:
        return await self._http.request("/branches")

    async def get_branch(self, branch_id: str) -> ApiResponse:
        return await self._http.request(f"/branches/{_segment(branch_id)}")

    # Products
    async def get_products(self, **params: Any) -> ApiResponse:
        """Lista produtos (page, limit, search, category, branch_id...)."""
        return await self._http.request(with_query("/products", params))

    async def get_product(self, product_id: str) -> ApiResponse:
        return await self._http.request(f"/products/{_segment(product_id)}")

    async def get_low_stock_products(self, branch_id: str | None = None) -> ApiResponse:
        return await self._http.request(with_query("/products/low-stock", {"branch_id": branch_id}))

    # Customers
    async def get_customers(self, **params: Any) -> ApiResponse:
        return await self._http.request(with_query("/customers", params))

    # Sales
    async def get_sales(self, **params: Any) -> ApiResponse:
        return await self._http.request(with_query("/sales", params))

    async def get_sale(self, sale_id: str) -> ApiResponse:
        return await self._http.request(f"/sales/{_segment(sale_id)}")

    async def create_sale(self, sale: dict[str, Any]) -> ApiResponse:
        """Cria venda. O payload segue o formato do backend (camelCase)."""
        return await self._http.request("/sales", method="POST", json=sale)

    # Refunds
    async def get_refunds(self, **params: Any) -> ApiResponse:
        return await self._http.request(with_query("/refunds", params))

    # Batches
    async def get_batches(self, **params: Any) -> ApiResponse:
        return await self._http.request(with_query("/batches", params))

    async def get_near_expiry_batches(self, days: int = 30) -> ApiResponse:
        return await self._http.request(with_query("/batches/near-expiry", {"days": days}))

    # Dashboard
    async def get_dashboard_stats(self, branch_id: str | None = None) -> ApiResponse:
        return await self._http.request(with_query("/dashboard/stats", {"branch_id": branch_id}))

    # Employees
    async def get_employees(self, **params: Any) -> ApiResponse:
        return await self._http.request(with_query("/employees", params))

    # Inventory
    async def get_inventory_summary(self, **params: Any) -> ApiResponse:
        return await self._http.request(with_query("/inventory/summary", params))

    # Sync
    async def get_sync_status(self) -> ApiResponse:
        return await self._http.request("/sync/status")

    async def check_connectivity(self) -> ApiResponse:
        return await self._http.request("/sync/connectivity")

    async def sync_to_postgresql(self) -> ApiResponse:
        return await self._http.request("/sync/to-postgresql", method="POST")

    async def sync_to_sqlite(self) -> ApiResponse:
        return await self._http.request("/sync/to-sqlite", method="POST")

    async def get_sync_queue(self) -> ApiResponse:
        return await self._http.request("/sync/queue")

    async def clear_sync_queue(self) -> ApiResponse:
        return await self._http.request("/sync/queue", method="DELETE")
