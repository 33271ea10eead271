"""Settings base do cliente MediBill Pulse: ambiente, logging e debug."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Environment = Literal["development", "staging", "production"]

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

_ENVIRONMENT_ALIASES: dict[str, Environment] = {
    "development": "development",
    "dev": "development",
    "local": "development",
    "staging": "staging",
    "stage": "staging",
    "production": "production",
    "prod": "production",
}

_TRUTHY = frozenset({"true", "1", "yes", "on"})


@dataclass(frozen=True)
class BaseSettings:
    """Configurações comuns a todos os componentes do cliente.

    Attributes:
        environment: development | staging | production
        service_name: Campo `service` dos logs
        debug: DEBUG_MODE; força nível DEBUG
        log_level: Nível usado quando debug está desligado
    """

    environment: Environment = "development"
    service_name: str = "medibill_client"
    debug: bool = False
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def strict_validation(self) -> bool:
        """Settings inválidas abortam o boot fora de development."""
        return self.environment != "development"

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()

    def validate(self) -> list[str]:
        """Retorna a lista de erros (vazia = OK)."""
        errors: list[str] = []
        if self.environment not in set(_ENVIRONMENT_ALIASES.values()):
            errors.append(f"ENVIRONMENT inválido: {self.environment}")
        if not self.service_name.strip():
            errors.append("SERVICE_NAME não pode ser vazio")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"LOG_LEVEL deve ser um de: {', '.join(sorted(VALID_LOG_LEVELS))}")
        return errors


def parse_environment(raw: str) -> Environment:
    """Normaliza aliases (prod, stage, local...); desconhecido vira development."""
    return _ENVIRONMENT_ALIASES.get(raw.strip().lower(), "development")


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Flag booleana de env (true/1/yes/on); vazio devolve o default."""
    if not value:
        return default
    return value.strip().lower() in _TRUTHY


def _load_base_from_env() -> BaseSettings:
    return BaseSettings(
        environment=parse_environment(os.getenv("ENVIRONMENT", "development")),
        service_name=os.getenv("SERVICE_NAME", "medibill_client"),
        debug=parse_bool(os.getenv("DEBUG_MODE", os.getenv("DEBUG"))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Instância cacheada; use cache_clear() nos testes."""
    return _load_base_from_env()
