"""Settings do backend REST consumido pelo cliente.

URL base, timeouts, readiness, throttling, retry e canal realtime.
Lidas uma única vez na construção do cliente (sem hot-reload).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from config.settings.base.core import parse_bool

BackendMode = Literal["embedded", "remote"]

DEFAULT_BASE_URL: str = "http://localhost:5001/api"
DEFAULT_REALTIME_PATH: str = "/sse/events"
HEALTH_PATH: str = "/health"


@dataclass(frozen=True)
class BackendSettings:
    """Configurações de acesso ao backend.

    Attributes:
        base_url: URL base da API (ex: http://localhost:5001/api)
        request_timeout_seconds: Timeout padrão por requisição
        backend_mode: embedded (processo local gerenciado) ou remote (sempre ativo)
        readiness_max_attempts: Tentativas do probe de saúde inicial
        readiness_interval_seconds: Intervalo entre probes
        readiness_probe_timeout_seconds: Timeout de cada probe
        readiness_extra_attempts: Tentativas do segundo laço de verificação
        readiness_extra_interval_seconds: Intervalo do segundo laço
        throttle_interval_seconds: Intervalo mínimo entre chamadas ao mesmo path
        max_retries: Retentativas de falhas de transporte (métodos idempotentes)
        backoff_base_seconds: Base do backoff exponencial
        backoff_max_seconds: Teto do backoff
        realtime_path: Path do stream de notificações
        realtime_reconnect_delay_seconds: Espera antes de reconectar o stream
        realtime_max_reconnect_attempts: 0 deixa a reconexão para o dono do canal
    """

    base_url: str = DEFAULT_BASE_URL
    request_timeout_seconds: float = 30.0
    backend_mode: BackendMode = "remote"

    # Readiness
    readiness_max_attempts: int = 30
    readiness_interval_seconds: float = 1.0
    readiness_probe_timeout_seconds: float = 5.0
    readiness_extra_attempts: int = 10
    readiness_extra_interval_seconds: float = 2.0

    # Throttling e retry
    throttle_interval_seconds: float = 1.0
    max_retries: int = 2
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 8.0

    # Realtime
    realtime_path: str = DEFAULT_REALTIME_PATH
    realtime_reconnect_delay_seconds: float = 5.0
    realtime_max_reconnect_attempts: int = 0

    @property
    def health_url(self) -> str:
        """URL de liveness: sufixo /api da base trocado por /health."""
        base = self.base_url.rstrip("/")
        if base.endswith("/api"):
            return base[: -len("/api")] + HEALTH_PATH
        return base + HEALTH_PATH

    @property
    def realtime_url(self) -> str:
        """URL completa do stream de notificações."""
        return f"{self.base_url.rstrip('/')}{self.realtime_path}"

    @property
    def is_embedded(self) -> bool:
        """True quando o backend roda como processo local gerenciado."""
        return self.backend_mode == "embedded"

    def validate(self) -> list[str]:
        """Valida configurações mínimas do backend.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.base_url:
            errors.append("API_BASE_URL é obrigatório")
        elif not _is_valid_url(self.base_url):
            errors.append("API_BASE_URL deve ser uma URL válida")

        if self.request_timeout_seconds <= 0:
            errors.append("API_TIMEOUT deve ser > 0")

        if self.backend_mode not in ("embedded", "remote"):
            errors.append(f"BACKEND_MODE inválido: {self.backend_mode}")

        if self.readiness_max_attempts < 1 or self.readiness_extra_attempts < 0:
            errors.append("Limites de readiness inválidos")

        if self.readiness_interval_seconds < 0 or self.readiness_probe_timeout_seconds <= 0:
            errors.append("Intervalos de readiness inválidos")

        if self.throttle_interval_seconds < 0:
            errors.append("THROTTLE_INTERVAL_SECONDS deve ser >= 0")

        if self.max_retries < 0:
            errors.append("HTTP_MAX_RETRIES deve ser >= 0")

        if self.realtime_max_reconnect_attempts < 0:
            errors.append("REALTIME_MAX_RECONNECT_ATTEMPTS deve ser >= 0")

        return errors


def _is_valid_url(value: str) -> bool:
    """Verifica se a string é uma URL http(s) absoluta."""
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _parse_timeout_seconds() -> float:
    """API_TIMEOUT vem em milissegundos; API_TIMEOUT_SECONDS tem precedência."""
    seconds = os.getenv("API_TIMEOUT_SECONDS")
    if seconds:
        return float(seconds)
    return int(os.getenv("API_TIMEOUT", "30000")) / 1000


def _load_backend_from_env() -> BackendSettings:
    """Carrega BackendSettings de variáveis de ambiente."""
    mode_str = os.getenv("BACKEND_MODE", "").lower()
    if not mode_str:
        mode_str = "embedded" if parse_bool(os.getenv("EMBEDDED_BACKEND")) else "remote"
    mode: BackendMode = "embedded" if mode_str == "embedded" else "remote"
    return BackendSettings(
        base_url=os.getenv("API_BASE_URL", DEFAULT_BASE_URL),
        request_timeout_seconds=_parse_timeout_seconds(),
        backend_mode=mode,
        readiness_max_attempts=int(os.getenv("READINESS_MAX_ATTEMPTS", "30")),
        readiness_interval_seconds=float(os.getenv("READINESS_INTERVAL_SECONDS", "1.0")),
        readiness_probe_timeout_seconds=float(
            os.getenv("READINESS_PROBE_TIMEOUT_SECONDS", "5.0")
        ),
        readiness_extra_attempts=int(os.getenv("READINESS_EXTRA_ATTEMPTS", "10")),
        readiness_extra_interval_seconds=float(
            os.getenv("READINESS_EXTRA_INTERVAL_SECONDS", "2.0")
        ),
        throttle_interval_seconds=float(os.getenv("THROTTLE_INTERVAL_SECONDS", "1.0")),
        max_retries=int(os.getenv("HTTP_MAX_RETRIES", "2")),
        backoff_base_seconds=float(os.getenv("HTTP_BACKOFF_BASE_SECONDS", "0.5")),
        backoff_max_seconds=float(os.getenv("HTTP_BACKOFF_MAX_SECONDS", "8.0")),
        realtime_path=os.getenv("REALTIME_PATH", DEFAULT_REALTIME_PATH),
        realtime_reconnect_delay_seconds=float(
            os.getenv("REALTIME_RECONNECT_DELAY_SECONDS", "5.0")
        ),
        realtime_max_reconnect_attempts=int(
            os.getenv("REALTIME_MAX_RECONNECT_ATTEMPTS", "0")
        ),
    )


@lru_cache(maxsize=1)
def get_backend_settings() -> BackendSettings:
    """Retorna instância cacheada de BackendSettings."""
    return _load_backend_from_env()
