"""Modelos da sessão autenticada do cliente."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """Usuário autenticado como devolvido pelo backend.

    Campos desconhecidos são preservados para regravação no storage.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    role: str = Field(..., min_length=1)
    username: str | None = None
    email: str | None = None
    branch_id: str | None = Field(None, alias="branchId")
    admin_id: str | None = Field(None, alias="adminId")
    permissions: list[str] | None = None

    def to_storage(self) -> str:
        """JSON no formato do backend (camelCase), sem campos None."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


@dataclass(frozen=True, slots=True)
class Session:
    """Par token/usuário. user só existe quando token existe."""

    token: str | None = None
    user: UserRecord | None = None

    def __post_init__(self) -> None:
        if self.user is not None and not self.token:
            raise ValueError("Sessão com usuário exige token")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


EMPTY_SESSION = Session()
