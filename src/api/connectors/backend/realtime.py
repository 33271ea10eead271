"""Canal realtime: stream Server-Sent Events do backend.

Recebe notificações fora do ciclo request/response e as traduz em
invalidação de sessão ou em eventos DATA_CHANGED no EventBus.
O token vai na query string, como o endpoint SSE do backend espera.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from api.connectors.backend.models import NotificationEnvelope
from app.events.models import ClientEvent, ClientEventType, InvalidationReason
from fsm import ConnectionState, StateMachine, create_connection_fsm

if TYPE_CHECKING:
    from app.events.bus import EventBus
    from app.protocols.session_manager import SessionProtocol
    from config.settings import BackendSettings

logger = logging.getLogger(__name__)

KEEPALIVE_TYPES = frozenset({"connected", "ping"})

# tipo da notificação → (entidade, chave do payload em data)
DATA_CHANGE_TYPES: dict[str, tuple[str, str]] = {
    "product_change": ("product", "product"),
    "sale_change": ("sale", "sale"),
    "refund_change": ("refund", "refund"),
    "customer_change": ("customer", "customer"),
    "inventory_change": ("inventory", "data"),
}

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Agrupa linhas SSE em payloads de evento.

    Linhas data: consecutivas são unidas por newline; uma linha vazia
    encerra o evento. Comentários (":") e outros campos são ignorados.
    Um evento sem linha vazia final é descartado.
    """
    buffer: list[str] = []
    async for line in lines:
        if not line:
            if buffer:
                yield "\n".join(buffer)
                buffer = []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            buffer.append(value)


class RealtimeChannel:
    """Consumidor do stream de notificações.

    Estados: DISCONNECTED → CONNECTING → CONNECTED → RECONNECT_PENDING → ...
    Fecha sozinho quando a sessão termina (SESSION_ENDED ou AUTH_REQUIRED).
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        session: SessionProtocol,
        event_bus: EventBus,
        reconnect_delay_seconds: float = 5.0,
        max_reconnect_attempts: int = 0,
        connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
    ) -> None:
        """Inicializa o canal.

        Args:
            client: httpx.AsyncClient usado para o stream
            url: URL completa do endpoint SSE
            session: Fonte do token e destino da invalidação
            event_bus: Barramento onde as notificações são publicadas
            reconnect_delay_seconds: Espera fixa entre reconexões
            max_reconnect_attempts: 0 deixa a reconexão para o dono do canal
            connect_timeout_seconds: Timeout de abertura do stream
        """
        self._client = client
        self._url = url
        self._session = session
        self._bus = event_bus
        self._reconnect_delay = reconnect_delay_seconds
        self._max_reconnect_attempts = max_reconnect_attempts
        self._connect_timeout = connect_timeout_seconds
        self._fsm: StateMachine = create_connection_fsm()
        self._task: asyncio.Task[None] | None = None
        self._closing = False
        self._last_message_at: float | None = None
        self._unsubscribers = [
            event_bus.subscribe(ClientEventType.SESSION_ENDED, self._on_session_end),
            event_bus.subscribe(ClientEventType.AUTH_REQUIRED, self._on_session_end),
        ]

    @property
    def state(self) -> ConnectionState:
        return ConnectionState(self._fsm.current_state)

    @property
    def last_message_at(self) -> float | None:
        """Instante monotônico da última mensagem (inclusive keepalive)."""
        return self._last_message_at

    @property
    def history(self) -> list[str]:
        return [t.to_state.name for t in self._fsm.history]

    def start(self) -> asyncio.Task[None]:
        """Abre o stream em background; idempotente enquanto houver tarefa ativa."""
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(self.run())
        return self._task

    async def run(self) -> None:
        """Consome o stream até close(), fim da sessão ou desistência.

        Após erro de transporte o estado fica RECONNECT_PENDING; com
        max_reconnect_attempts > 0 o canal tenta de novo após o delay fixo.
        """
        self._closing = False
        reconnects = 0
        try:
            while not self._closing:
                token = self._session.current_token()
                if not token:
                    logger.info("realtime_no_token")
                    break
                self._transition(ConnectionState.CONNECTING, "connect")
                try:
                    connected = await self._consume(token)
                except httpx.HTTPError as exc:
                    logger.warning(
                        "realtime_stream_error",
                        extra={"error_type": type(exc).__name__},
                    )
                    connected = False
                if self._closing:
                    break
                self._transition(ConnectionState.RECONNECT_PENDING, "stream_lost")
                if connected:
                    reconnects = 0
                if reconnects >= self._max_reconnect_attempts:
                    return
                reconnects += 1
                await asyncio.sleep(self._reconnect_delay)
        except asyncio.CancelledError:
            self._transition(ConnectionState.DISCONNECTED, "cancelled")
            raise
        self._transition(ConnectionState.DISCONNECTED, "closed")

    async def close(self) -> None:
        """Encerra o stream; estado final DISCONNECTED."""
        self._closing = True
        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._transition(ConnectionState.DISCONNECTED, "closed")

    def dispose(self) -> None:
        """Remove as assinaturas do EventBus."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def handle_message(self, raw: str) -> None:
        """Valida e despacha um payload JSON recebido do stream."""
        try:
            envelope = NotificationEnvelope.model_validate_json(raw)
        except ValidationError:
            logger.warning("realtime_message_invalid", extra={"size": len(raw)})
            return
        self._last_message_at = time.monotonic()
        self.dispatch(envelope)

    def dispatch(self, envelope: NotificationEnvelope) -> None:
        kind = envelope.type
        if kind in KEEPALIVE_TYPES:
            logger.debug("realtime_keepalive", extra={"type": kind})
            return

        if kind == "account_deactivated":
            logger.warning("realtime_account_deactivated")
            self._bus.publish(
                ClientEvent(
                    event_type=ClientEventType.ACCOUNT_DEACTIVATED,
                    message=envelope.message,
                )
            )
            self._session.invalidate(InvalidationReason.ACCOUNT_DEACTIVATED, envelope.message)
            return

        if kind == "account_reactivated":
            self._bus.publish(
                ClientEvent(
                    event_type=ClientEventType.ACCOUNT_REACTIVATED,
                    message=envelope.message,
                )
            )
            return

        if kind in DATA_CHANGE_TYPES:
            self._publish_data_change(kind, envelope)
            return

        logger.info("realtime_unknown_type", extra={"type": kind})

    async def _consume(self, token: str) -> bool:
        timeout = httpx.Timeout(self._connect_timeout, read=None)
        async with self._client.stream(
            "GET",
            self._url,
            params={"token": token},
            headers={"Accept": "text/event-stream"},
            timeout=timeout,
        ) as response:
            response.raise_for_status()
            self._transition(ConnectionState.CONNECTED, "stream_opened")
            self._last_message_at = time.monotonic()
            async for payload in iter_sse_data(response.aiter_lines()):
                self.handle_message(payload)
                if self._closing:
                    break
        return True

    def _publish_data_change(self, kind: str, envelope: NotificationEnvelope) -> None:
        entity, payload_key = DATA_CHANGE_TYPES[kind]
        data = envelope.data or {}
        action = data.get("action")
        payload = data.get(payload_key)
        if not action or not payload:
            logger.debug("realtime_change_incomplete", extra={"type": kind})
            return
        self._bus.publish(
            ClientEvent(
                event_type=ClientEventType.DATA_CHANGED,
                message=envelope.message or f"{entity.capitalize()} {action}",
                data={"entity": entity, "action": action, "payload": payload},
            )
        )

    def _on_session_end(self, event: ClientEvent) -> None:
        self._closing = True
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            return
        # sem tarefa viva (nunca iniciou ou stream já perdido): fecha aqui
        self._transition(ConnectionState.DISCONNECTED, "session_ended")

    def _transition(self, target: ConnectionState, trigger: str) -> None:
        if self._fsm.current_state == target:
            return
        result = self._fsm.transition(target, trigger=trigger)
        if result.transition is None:
            logger.warning("realtime_transition_rejected", extra={"reason": result.error_reason})
            return
        self._bus.publish(
            ClientEvent(
                event_type=ClientEventType.REALTIME_STATE_CHANGED,
                data=result.transition.to_event_data(),
            )
        )


def create_realtime_channel(
    client: httpx.AsyncClient,
    session: SessionProtocol,
    event_bus: EventBus,
    settings: BackendSettings,
) -> RealtimeChannel:
    return RealtimeChannel(
        client=client,
        url=settings.realtime_url,
        session=session,
        event_bus=event_bus,
        reconnect_delay_seconds=settings.realtime_reconnect_delay_seconds,
        max_reconnect_attempts=settings.realtime_max_reconnect_attempts,
    )
