"""Seleção mutável de empresa/filial (o colaborador externo de escopo)."""

from __future__ import annotations

from app.context.scope import Scope


class ScopeSelection:
    """Mantém a empresa/filial escolhidas pelo usuário.

    Registre `selection.accessor` no ScopeProvider; cada requisição lê
    a seleção vigente naquele instante.
    """

    def __init__(self, company_id: str | None = None, branch_id: str | None = None) -> None:
        self._company_id = company_id
        self._branch_id = branch_id

    @property
    def company_id(self) -> str | None:
        return self._company_id

    @property
    def branch_id(self) -> str | None:
        return self._branch_id

    def select_company(self, company_id: str | None) -> None:
        """Troca a empresa; a filial anterior deixa de valer."""
        if company_id != self._company_id:
            self._branch_id = None
        self._company_id = company_id

    def select_branch(self, branch_id: str | None) -> None:
        self._branch_id = branch_id

    def clear(self) -> None:
        self._company_id = None
        self._branch_id = None

    def accessor(self) -> Scope:
        return Scope(company_id=self._company_id, branch_id=self._branch_id)
