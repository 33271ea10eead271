"""Pipeline único de requisições ao backend.

Toda chamada de saída passa por BackendHttpClient.request():
- Precondição de token para endpoints protegidos (sem rede)
- Prontidão do backend embarcado (uma vez por cold start)
- Coalescência e throttling por endpoint (RequestGate)
- Headers de escopo, bearer token e correlation id
- Timeout por chamada e cancelamento externo
- Classificação da resposta em ApiResponse ou exceção tipada

Logging estruturado sem tokens nem corpo de resposta.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from api.connectors.backend.errors import (
    GENERIC_ERROR_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    ApiResponseError,
    AuthenticationRequiredError,
    BackendUnreachableError,
    RateLimitedError,
    RequestAbortedError,
    RequestTimeoutError,
    TransportError,
    UnexpectedResponseError,
    parse_error_body,
)
from api.connectors.backend.gate import RequestGate
from api.connectors.backend.http_base import HttpClientConfig, RetryPolicy, _backoff_sleep
from api.connectors.backend.models import ApiResponse
from api.connectors.backend.request_logging import (
    log_api_error,
    log_success,
    log_transport_error,
)
from app.events.models import InvalidationReason
from app.observability import get_correlation_id, record_latency

if TYPE_CHECKING:
    from api.connectors.backend.readiness import ReadinessProber
    from app.context.scope import ScopeProvider
    from app.protocols.session_manager import SessionProtocol
    from config.settings import BackendSettings

logger: logging.Logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
PUBLIC_PATHS = ("/auth/login", "/auth/register")
HEALTH_MARKER = "/health"

_REASON_BY_CODE = {
    "ACCOUNT_DEACTIVATED": InvalidationReason.ACCOUNT_DEACTIVATED,
    "SESSION_EXPIRED_ANOTHER_DEVICE": InvalidationReason.SESSION_EXPIRED_ANOTHER_DEVICE,
}


def is_protected_path(path: str) -> bool:
    """Tudo exceto login e registro exige token."""
    return not any(public in path for public in PUBLIC_PATHS)


def is_health_path(path: str) -> bool:
    return HEALTH_MARKER in path


def reason_for_code(code: str | None) -> InvalidationReason:
    """Motivo da invalidação a partir do campo code do 401."""
    if code is None:
        return InvalidationReason.SESSION_EXPIRED
    return _REASON_BY_CODE.get(code, InvalidationReason.SESSION_EXPIRED)


class BackendHttpClient:
    """Cliente HTTP do backend com estado próprio por instância.

    Token, accessor de escopo, mapas de endpoint e prontidão pertencem
    a esta instância (ou aos colaboradores injetados); nada é global.
    """

    def __init__(
        self,
        config: HttpClientConfig,
        session: SessionProtocol | None = None,
        scope: ScopeProvider | None = None,
        readiness: ReadinessProber | None = None,
        gate: RequestGate | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Inicializa o pipeline.

        Args:
            config: URL base, timeout, throttle e política de retry
            session: Fonte do token e destino das invalidações
            scope: Fornecedor dos headers de empresa/filial
            readiness: Probe do backend embarcado (None desativa)
            gate: Coalescência/throttling (criado a partir do config se None)
            client: httpx.AsyncClient injetável (testes usam MockTransport)
        """
        self._config = config
        self._session = session
        self._scope = scope
        self._readiness = readiness
        self._gate = gate or RequestGate(config.throttle_interval_seconds)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(verify=config.verify_ssl)

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def gate(self) -> RequestGate:
        return self._gate

    @property
    def readiness(self) -> ReadinessProber | None:
        return self._readiness

    @property
    def http(self) -> httpx.AsyncClient:
        """Cliente httpx subjacente (compartilhado com o canal realtime)."""
        return self._client

    def bind_session(self, session: SessionProtocol) -> None:
        self._session = session

    def attach_readiness(self, readiness: ReadinessProber) -> None:
        self._readiness = readiness

    def reset_backend_ready(self) -> None:
        """Força novo probe de prontidão (após reinício do backend)."""
        if self._readiness is not None:
            self._readiness.reset()

    async def request(
        self,
        path: str,
        method: str = "GET",
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ApiResponse:
        """Executa uma chamada ao backend.

        Args:
            path: Path relativo à URL base, com query string
            method: Método HTTP
            json: Corpo a serializar como JSON (None = sem corpo)
            headers: Headers extras, aplicados por último
            timeout: Deadline total de cada tentativa, em segundos (padrão do
                config se None). Com retry, o pior caso é
                (max_retries + 1) vezes o timeout, mais o backoff.
            cancel: Evento externo de cancelamento

        Returns:
            ApiResponse para 2xx e para o desfecho "conta desativada"

        Raises:
            AuthenticationRequiredError: sem token ou sessão invalidada (401)
            RateLimitedError: 429
            ApiResponseError: não-2xx com corpo JSON
            UnexpectedResponseError: não-2xx sem JSON
            RequestTimeoutError / RequestAbortedError: timeout ou cancelamento
            BackendUnreachableError / BackendNotReadyError: sem conexão
        """
        method = method.upper()
        if is_protected_path(path) and not self._current_token():
            logger.info("request_blocked_no_token", extra={"method": method, "path": path})
            raise AuthenticationRequiredError()

        readiness = self._readiness
        if readiness is not None and not is_health_path(path):
            # cancel sempre interrompe; deadline só com timeout explícito, senão
            # valem os limites do prober (BackendNotReadyError)
            await _guarded(readiness.ensure_ready(), timeout, cancel)

        body = _encode_body(json)
        return await self._gate.run(
            method,
            path,
            body,
            lambda: self._send(path, method, body, headers, timeout, cancel),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> BackendHttpClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _send(
        self,
        path: str,
        method: str,
        body: bytes | None,
        extra_headers: dict[str, str] | None,
        timeout: float | None,
        cancel: asyncio.Event | None,
    ) -> ApiResponse:
        url = f"{self._config.base_url}{path}"
        policy: RetryPolicy = self._config.retry
        attempt = 0
        while True:
            # Token e escopo são lidos de novo a cada tentativa
            headers = self._build_headers(extra_headers)
            started = time.perf_counter()
            try:
                response = await self._perform(method, url, body, headers, timeout, cancel)
            except TransportError as exc:
                log_transport_error(method, path, type(exc).__name__, attempt)
                if isinstance(exc, RequestAbortedError) or not policy.should_retry(method, attempt):
                    raise
                await _backoff_sleep(attempt, policy)
                attempt += 1
                continue

            record_latency(
                "backend_http",
                f"{method} {path}",
                (time.perf_counter() - started) * 1000,
                correlation_id=get_correlation_id() or None,
                status_code=response.status_code,
            )
            return self._classify(path, method, response)

    async def _perform(
        self,
        method: str,
        url: str,
        body: bytes | None,
        headers: dict[str, str],
        timeout: float | None,
        cancel: asyncio.Event | None,
    ) -> httpx.Response:
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds
        send = self._client.request(
            method,
            url,
            content=body,
            headers=headers,
            timeout=effective_timeout,
        )
        try:
            return await _guarded(send, effective_timeout, cancel)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError() from exc
        except httpx.TransportError as exc:
            raise BackendUnreachableError() from exc

    def _build_headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = dict(self._config.default_headers)
        token = self._current_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if self._scope is not None:
            headers.update(self._scope.headers())
        correlation_id = get_correlation_id()
        if correlation_id:
            headers[CORRELATION_HEADER] = correlation_id
        if extra:
            headers.update(extra)
        return headers

    def _classify(self, path: str, method: str, response: httpx.Response) -> ApiResponse:
        status = response.status_code
        if status == 429:
            logger.warning("backend_rate_limited", extra={"method": method, "path": path})
            raise RateLimitedError()

        is_json, body = _decode_body(response)
        if response.is_success:
            log_success(method, path, status)
            if is_json:
                return ApiResponse.from_body(body, status)
            return ApiResponse(success=True, data=body, status_code=status, raw=body)

        if not is_json:
            raise UnexpectedResponseError(
                body or GENERIC_ERROR_MESSAGE,
                status_code=status,
                is_retryable=status >= 500,
            )

        error_body = parse_error_body(body)
        log_api_error(error_body, method, path, status)

        if status in (401, 403) and error_body.account_disabled:
            return ApiResponse.disabled(error_body.raw, status)

        if status == 401 and is_protected_path(path):
            reason = reason_for_code(error_body.code)
            message = (
                SESSION_EXPIRED_MESSAGE
                if reason == InvalidationReason.SESSION_EXPIRED
                else error_body.message
            )
            if self._session is not None:
                self._session.invalidate(reason, message)
            raise AuthenticationRequiredError(message, status_code=401, reason=reason)

        raise ApiResponseError(
            error_body.message,
            status_code=status,
            field=error_body.field,
            errors=error_body.errors,
            response=body,
        )

    def _current_token(self) -> str | None:
        if self._session is None:
            return None
        return self._session.current_token()


def _encode_body(payload: Any) -> bytes | None:
    if payload is None:
        return None
    return json.dumps(payload, separators=(",", ":"), default=str).encode()


def _decode_body(response: httpx.Response) -> tuple[bool, Any]:
    """Retorna (é_json, corpo). Corpo vazio → (False, None)."""
    if not response.content:
        return False, None
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return True, response.json()
        except ValueError:
            logger.warning("backend_invalid_json", extra={"status_code": response.status_code})
    return False, response.text


async def _guarded(awaitable: Any, deadline: float | None, cancel: asyncio.Event | None) -> Any:
    """Aguarda `awaitable` sob deadline total (None = sem) e cancelamento externo."""
    try:
        async with asyncio.timeout(deadline):
            if cancel is None:
                return await awaitable
            return await _race_cancel(awaitable, cancel)
    except TimeoutError as exc:
        raise RequestTimeoutError() from exc


async def _race_cancel(send: Any, cancel: asyncio.Event) -> Any:
    """Aguarda `send` ou o evento de cancelamento, o que vier antes."""
    request_task = asyncio.ensure_future(send)
    if cancel.is_set():
        request_task.cancel()
        raise RequestAbortedError()
    cancel_task = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {request_task, cancel_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in (request_task, cancel_task):
            if not task.done():
                task.cancel()
    if request_task in done:
        return request_task.result()
    raise RequestAbortedError()


def create_backend_http_client(
    settings: BackendSettings | None = None,
    session: SessionProtocol | None = None,
    scope: ScopeProvider | None = None,
    client: httpx.AsyncClient | None = None,
) -> BackendHttpClient:
    """Factory para criar o pipeline com config do ambiente.

    Args:
        settings: BackendSettings opcional. Se None, carrega do ambiente.
        session: Fonte do token
        scope: Fornecedor dos headers de escopo
        client: httpx.AsyncClient opcional

    Returns:
        Pipeline configurado, com probe de prontidão.
    """
    # Import local para evitar dependência circular
    from api.connectors.backend.readiness import ReadinessConfig, ReadinessProber
    from config.settings import get_backend_settings

    backend = settings or get_backend_settings()
    config = http_config_from_settings(backend)
    pipeline = BackendHttpClient(config=config, session=session, scope=scope, client=client)
    pipeline.attach_readiness(
        ReadinessProber(ReadinessConfig.from_settings(backend), pipeline.http)
    )
    return pipeline


def http_config_from_settings(settings: BackendSettings) -> HttpClientConfig:
    return HttpClientConfig(
        base_url=settings.base_url,
        timeout_seconds=settings.request_timeout_seconds,
        throttle_interval_seconds=settings.throttle_interval_seconds,
        retry=RetryPolicy(
            max_retries=settings.max_retries,
            backoff_base_seconds=settings.backoff_base_seconds,
            backoff_max_seconds=settings.backoff_max_seconds,
        ),
    )
