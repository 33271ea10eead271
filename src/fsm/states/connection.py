"""
Estados do canal realtime (stream de notificações do servidor).

Ciclo: DISCONNECTED → CONNECTING → CONNECTED → (erro) → RECONNECT_PENDING
→ CONNECTING → ... DISCONNECTED só é alcançado por decisão do dono do
canal (close/logout); um erro de transporte nunca leva direto a ele.
"""

from enum import StrEnum


class ConnectionState(StrEnum):
    """
    Estados canônicos do canal realtime.

        - DISCONNECTED: Sem stream aberto (inicial e pós-close)
        - CONNECTING: Requisição do stream em andamento
        - CONNECTED: Stream aberto recebendo mensagens
        - RECONNECT_PENDING: Stream caiu; aguardando nova tentativa
    """

    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    RECONNECT_PENDING = "RECONNECT_PENDING"

    def __str__(self) -> str:
        return self.value


# Estado inicial padrão para canais novos
DEFAULT_CONNECTION_STATE: ConnectionState = ConnectionState.DISCONNECTED

# Estados em que existe (ou está sendo aberto) um stream
ACTIVE_CONNECTION_STATES: frozenset[ConnectionState] = frozenset({
    ConnectionState.CONNECTING,
    ConnectionState.CONNECTED,
})


def is_active(state: ConnectionState) -> bool:
    """Verifica se o canal tem um stream aberto ou abrindo."""
    return state in ACTIVE_CONNECTION_STATES
