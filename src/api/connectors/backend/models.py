"""Modelos de resposta e de notificação do backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ApiResponse:
    """Resultado já classificado de uma chamada ao backend.

    Devolvido para respostas 2xx e para o desfecho "conta desativada",
    que não é tratado como exceção.
    """

    success: bool
    data: Any = None
    message: str | None = None
    errors: list[Any] | None = None
    account_disabled: bool = False
    status_code: int | None = None
    raw: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_body(cls, body: Any, status_code: int | None = None) -> ApiResponse:
        """Monta a resposta a partir do envelope {success, data, message}.

        Corpos sem o envelope viram data com success=True.
        """
        if not isinstance(body, dict) or "success" not in body:
            return cls(success=True, data=body, status_code=status_code, raw=body)

        known = {"success", "data", "message", "errors", "accountDisabled"}
        errors = body.get("errors")
        return cls(
            success=bool(body.get("success")),
            data=body.get("data"),
            message=body.get("message"),
            errors=errors if isinstance(errors, list) else None,
            account_disabled=body.get("accountDisabled") is True,
            status_code=status_code,
            raw=body,
            extra={k: v for k, v in body.items() if k not in known},
        )

    @classmethod
    def disabled(cls, body: dict[str, Any], status_code: int) -> ApiResponse:
        """Desfecho de conta desativada (401/403 com accountDisabled)."""
        return cls(
            success=False,
            data=body.get("data"),
            message=body.get("message"),
            account_disabled=True,
            status_code=status_code,
            raw=body,
        )

    @classmethod
    def failure(
        cls,
        message: str,
        status_code: int | None = None,
        errors: list[Any] | None = None,
        raw: Any = None,
    ) -> ApiResponse:
        """Falha de aplicação devolvida (login/registro)."""
        return cls(
            success=False,
            message=message,
            errors=errors,
            status_code=status_code,
            raw=raw,
        )


class NotificationEnvelope(BaseModel):
    """Mensagem recebida pelo canal realtime."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., min_length=1)
    message: str | None = None
    data: dict[str, Any] | None = None
    timestamp: str | None = None
