"""Testes do ScopeProvider e da ScopeSelection."""

from __future__ import annotations

from app.context import BRANCH_HEADER, COMPANY_HEADER, Scope, ScopeProvider, ScopeSelection


class TestScope:
    """Construção do escopo a partir de mapeamentos."""

    def test_from_mapping_camel_case(self) -> None:
        scope = Scope.from_mapping({"companyId": 7, "branchId": "b-1"})
        assert scope == Scope(company_id="7", branch_id="b-1")

    def test_from_mapping_snake_case_and_empty(self) -> None:
        scope = Scope.from_mapping({"company_id": "c-1", "branch_id": ""})
        assert scope == Scope(company_id="c-1", branch_id=None)


class TestScopeProvider:
    """Headers de escopo lidos a cada chamada."""

    def test_no_accessor_no_headers(self) -> None:
        provider = ScopeProvider()
        assert not provider.has_accessor
        assert provider.headers() == {}

    def test_accessor_returning_none(self) -> None:
        provider = ScopeProvider()
        provider.set_accessor(lambda: None)
        assert provider.headers() == {}

    def test_only_present_values(self) -> None:
        provider = ScopeProvider()
        provider.set_accessor(lambda: {"companyId": "c-1"})
        assert provider.headers() == {COMPANY_HEADER: "c-1"}

    def test_reads_selection_at_call_time(self) -> None:
        """Troca de filial vale na próxima leitura, sem cache."""
        selection = ScopeSelection(company_id="c-1", branch_id="b-1")
        provider = ScopeProvider()
        provider.set_accessor(selection.accessor)
        assert provider.headers() == {COMPANY_HEADER: "c-1", BRANCH_HEADER: "b-1"}

        selection.select_branch("b-2")
        assert provider.headers()[BRANCH_HEADER] == "b-2"

        provider.clear()
        assert provider.headers() == {}


class TestScopeSelection:
    """Regras de seleção de empresa/filial."""

    def test_company_change_drops_branch(self) -> None:
        selection = ScopeSelection(company_id="c-1", branch_id="b-1")
        selection.select_company("c-2")
        assert selection.company_id == "c-2"
        assert selection.branch_id is None

    def test_same_company_keeps_branch(self) -> None:
        selection = ScopeSelection(company_id="c-1", branch_id="b-1")
        selection.select_company("c-1")
        assert selection.branch_id == "b-1"

    def test_clear(self) -> None:
        selection = ScopeSelection(company_id="c-1", branch_id="b-1")
        selection.clear()
        assert selection.accessor() == Scope()
