"""Propagação do escopo selecionado (empresa/filial) para as requisições.

O pipeline chama headers() imediatamente antes de montar cada requisição,
então uma troca de filial vale já na próxima chamada.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

COMPANY_HEADER = "X-Company-ID"
BRANCH_HEADER = "X-Branch-ID"


@dataclass(frozen=True, slots=True)
class Scope:
    """Escopo de tenant/filial do chamador."""

    company_id: str | None = None
    branch_id: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Scope:
        """Aceita chaves camelCase (companyId) ou snake_case (company_id)."""
        company = data.get("companyId", data.get("company_id"))
        branch = data.get("branchId", data.get("branch_id"))
        return cls(
            company_id=str(company) if company else None,
            branch_id=str(branch) if branch else None,
        )


ScopeAccessor = Callable[[], "Scope | Mapping[str, Any] | None"]


class ScopeProvider:
    """Guarda o accessor de escopo registrado pela camada de seleção."""

    __slots__ = ("_accessor",)

    def __init__(self) -> None:
        self._accessor: ScopeAccessor | None = None

    def set_accessor(self, accessor: ScopeAccessor) -> None:
        """Registra a função sem argumentos que devolve o escopo atual."""
        self._accessor = accessor

    def clear(self) -> None:
        """Remove o accessor (headers de escopo deixam de ser enviados)."""
        self._accessor = None

    @property
    def has_accessor(self) -> bool:
        return self._accessor is not None

    def current_scope(self) -> Scope:
        """Lê o escopo agora, sem cache. Sem accessor → escopo vazio."""
        if self._accessor is None:
            return Scope()
        value = self._accessor()
        if value is None:
            return Scope()
        if isinstance(value, Scope):
            return value
        return Scope.from_mapping(value)

    def headers(self) -> dict[str, str]:
        """Headers de escopo apenas para valores presentes."""
        scope = self.current_scope()
        headers: dict[str, str] = {}
        if scope.company_id:
            headers[COMPANY_HEADER] = scope.company_id
        if scope.branch_id:
            headers[BRANCH_HEADER] = scope.branch_id
        return headers
