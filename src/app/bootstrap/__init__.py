"""Bootstrap do cliente: inicialização e wiring.

Este módulo é o composition root: configura logging, valida
configuração e monta as instâncias do cliente do backend.

Uso:
    from app.bootstrap import build_backend_client, initialize_app

    # Na inicialização do processo
    initialize_app()

    async with build_backend_client() as client:
        await client.session.login({"usernameOrEmail": "...", "password": "..."})
        products = await client.api.get_products(page=1)
"""

from __future__ import annotations

import logging

from app.bootstrap.dependencies import (
    BackendClient,
    build_backend_client,
    create_key_value_store,
)
from app.observability import get_correlation_id
from config.logging import configure_logging, configure_logging_from_settings
from config.settings import (
    get_backend_settings,
    get_base_settings,
    get_session_settings,
)

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa o cliente com as configurações do ambiente.

    Deve ser chamada uma vez no início do processo.

    Configura:
    - Logging estruturado JSON com correlation_id
    - Validação das settings (falha rápido em staging/production)
    """
    configure_logging_from_settings(
        get_base_settings(),
        correlation_id_getter=get_correlation_id,
    )
    validate_runtime_settings()


def initialize_test_app() -> None:
    """Inicializa logging em nível DEBUG para testes."""
    base = get_base_settings()
    configure_logging(
        level="DEBUG",
        service_name=f"{base.service_name}_test",
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    base = get_base_settings()
    strict_mode = base.strict_validation
    errors: list[str] = []

    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"backend: {error}" for error in get_backend_settings().validate())
    errors.extend(f"session: {error}" for error in get_session_settings().validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")


__all__ = [
    "BackendClient",
    "build_backend_client",
    "create_key_value_store",
    "initialize_app",
    "initialize_test_app",
    "validate_runtime_settings",
]
