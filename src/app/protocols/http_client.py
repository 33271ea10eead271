"""Protocolos HTTP usados pelo app.

Evita dependência direta da camada api.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from api.connectors.backend.models import ApiResponse


class BackendHttpClientProtocol(Protocol):
    """Contrato mínimo do pipeline de requisições ao backend."""

    async def request(
        self,
        path: str,
        method: str = "GET",
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ApiResponse: ...
