"""Gerenciador da sessão autenticada do cliente.

Fonte única de "quem está logado" e do bearer token. Memória e storage
persistido são atualizados juntos, na mesma chamada síncrona, e limpos
juntos em logout ou invalidação.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from api.connectors.backend.errors import (
    SESSION_EXPIRED_MESSAGE,
    ApiResponseError,
    UnexpectedResponseError,
)
from api.connectors.backend.models import ApiResponse
from app.events.models import ClientEvent, ClientEventType, InvalidationReason
from app.sessions.models import EMPTY_SESSION, Session, UserRecord
from app.sessions.permissions import role_can_access, role_has_permission
from config.settings.base.session import DEFAULT_TOKEN_KEY, DEFAULT_USER_KEY

if TYPE_CHECKING:
    from app.events.bus import EventBus
    from app.protocols.http_client import BackendHttpClientProtocol
    from app.protocols.key_value_store import KeyValueStoreProtocol

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
INVALID_AUTH_RESPONSE_MESSAGE = "Invalid authentication response"


class SessionManager:
    """Dono do token e do usuário autenticado.

    Escritas feitas por outro handle do storage (outra aba/processo)
    chegam pela assinatura do store e são espelhadas em memória.
    """

    __slots__ = ("_bus", "_http", "_session", "_store", "_token_key", "_unsubscribe", "_user_key")

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        event_bus: EventBus,
        http_client: BackendHttpClientProtocol | None = None,
        token_key: str = DEFAULT_TOKEN_KEY,
        user_key: str = DEFAULT_USER_KEY,
    ) -> None:
        """Inicializa gerenciador.

        Args:
            store: Storage chave-valor onde a sessão é persistida
            event_bus: Barramento para SESSION_STARTED/SESSION_ENDED/AUTH_REQUIRED
            http_client: Pipeline usado em login/registro (pode ser ligado depois)
            token_key: Chave do token no storage
            user_key: Chave do usuário serializado no storage
        """
        self._store = store
        self._bus = event_bus
        self._http = http_client
        self._token_key = token_key
        self._user_key = user_key
        self._session: Session = EMPTY_SESSION
        self._unsubscribe = store.subscribe(self._on_storage_change)

    def bind_http_client(self, http_client: BackendHttpClientProtocol) -> None:
        """Liga o pipeline (resolve a dependência circular na composição)."""
        self._http = http_client

    @property
    def session(self) -> Session:
        return self._session

    @property
    def user(self) -> UserRecord | None:
        return self._session.user

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    def current_token(self) -> str | None:
        """Token atual; relê o storage quando a memória está vazia."""
        if not self._session.token:
            stored = self._store.get(self._token_key)
            if stored:
                self._session = Session(token=stored, user=self._load_user())
                logger.debug("session_token_refreshed_from_store")
        return self._session.token

    def restore(self) -> Session:
        """Restaura a sessão persistida no cold start.

        O par só é aceito se o usuário tiver id e role; caso contrário
        as duas chaves são removidas.
        """
        token = self._store.get(self._token_key)
        raw_user = self._store.get(self._user_key)
        if token and raw_user:
            user = _parse_user(raw_user)
            if user is not None:
                self._session = Session(token=token, user=user)
                logger.info("session_restored", extra={"role": user.role})
                return self._session
            logger.warning("session_restore_invalid_user")
        self._clear()
        return self._session

    async def login(self, credentials: Mapping[str, Any]) -> ApiResponse:
        """Autentica no backend e persiste a sessão.

        Args:
            credentials: {"usernameOrEmail": ..., "password": ...}

        Returns:
            ApiResponse do backend. Em erro de aplicação, success=False com a
            mensagem do servidor e nenhum estado alterado.
        """
        return await self._authenticate(LOGIN_PATH, credentials)

    async def register(self, user_data: Mapping[str, Any]) -> ApiResponse:
        """Cria conta e já abre a sessão, como o login."""
        return await self._authenticate(REGISTER_PATH, user_data)

    def logout(self) -> None:
        """Limpa token, usuário e cópias persistidas. Idempotente."""
        had_session = self._has_session()
        self._clear()
        if had_session:
            logger.info("session_logout")
            self._bus.publish(ClientEvent(event_type=ClientEventType.SESSION_ENDED))

    def invalidate(
        self,
        reason: str = InvalidationReason.SESSION_EXPIRED,
        message: str | None = None,
    ) -> bool:
        """Invalidação sinalizada pelo servidor (401 ou canal realtime).

        Idempotente: AUTH_REQUIRED só é publicado quando havia sessão.

        Returns:
            True se havia sessão e ela foi limpa.
        """
        had_session = self._has_session()
        self._clear()
        if not had_session:
            logger.debug("session_invalidate_noop", extra={"reason": str(reason)})
            return False
        logger.warning("session_invalidated", extra={"reason": str(reason)})
        self._bus.publish(
            ClientEvent(
                event_type=ClientEventType.AUTH_REQUIRED,
                message=message or SESSION_EXPIRED_MESSAGE,
                reason=str(reason),
            )
        )
        return True

    def has_role(self, *roles: str) -> bool:
        user = self._session.user
        return user is not None and user.role in roles

    def has_permission(self, resource: str, action: str) -> bool:
        user = self._session.user
        return user is not None and role_has_permission(user.role, resource, action)

    def can_access(self, resource: str) -> bool:
        user = self._session.user
        return user is not None and role_can_access(user.role, resource)

    def close(self) -> None:
        """Cancela a assinatura do storage."""
        self._unsubscribe()

    async def _authenticate(self, path: str, payload: Mapping[str, Any]) -> ApiResponse:
        if self._http is None:
            raise RuntimeError("SessionManager sem http_client; chame bind_http_client()")
        try:
            response = await self._http.request(path, method="POST", json=dict(payload))
        except ApiResponseError as exc:
            logger.info(
                "auth_request_rejected",
                extra={"path": path, "status_code": exc.status_code},
            )
            return ApiResponse.failure(
                exc.message,
                status_code=exc.status_code,
                errors=exc.errors,
                raw=exc.response,
            )
        except UnexpectedResponseError as exc:
            logger.info(
                "auth_request_unexpected_response",
                extra={"path": path, "status_code": exc.status_code},
            )
            return ApiResponse.failure(exc.message, status_code=exc.status_code)

        if not response.success or not isinstance(response.data, Mapping):
            logger.info(
                "auth_request_unsuccessful",
                extra={"path": path, "account_disabled": response.account_disabled},
            )
            return response

        token = response.data.get("token")
        try:
            user = UserRecord.model_validate(response.data.get("user"))
        except ValidationError:
            user = None
        if not token or user is None:
            logger.warning("auth_response_invalid", extra={"path": path})
            return ApiResponse.failure(
                INVALID_AUTH_RESPONSE_MESSAGE,
                status_code=response.status_code,
                raw=response.raw,
            )

        self._write(str(token), user)
        logger.info("session_started", extra={"role": user.role})
        self._bus.publish(
            ClientEvent(
                event_type=ClientEventType.SESSION_STARTED,
                data={"user_id": user.id, "role": user.role},
            )
        )
        return response

    def _write(self, token: str, user: UserRecord) -> None:
        self._store.set(self._token_key, token)
        self._store.set(self._user_key, user.to_storage())
        self._session = Session(token=token, user=user)

    def _clear(self) -> None:
        self._session = EMPTY_SESSION
        self._store.remove(self._token_key)
        self._store.remove(self._user_key)

    def _has_session(self) -> bool:
        return bool(self._session.token) or bool(self._store.get(self._token_key))

    def _load_user(self) -> UserRecord | None:
        raw = self._store.get(self._user_key)
        return _parse_user(raw) if raw else None

    def _on_storage_change(self, key: str, value: str | None) -> None:
        if key == self._token_key:
            if value:
                self._session = Session(token=value, user=self._load_user())
                logger.debug("session_token_synced")
                return
            had_session = self._session.is_authenticated
            self._session = EMPTY_SESSION
            if had_session:
                logger.info("session_ended_elsewhere")
                self._bus.publish(ClientEvent(event_type=ClientEventType.SESSION_ENDED))
            return

        if key == self._user_key and self._session.token:
            user = _parse_user(value) if value else None
            self._session = Session(token=self._session.token, user=user)


def _parse_user(raw: str) -> UserRecord | None:
    try:
        return UserRecord.model_validate_json(raw)
    except ValidationError:
        return None
