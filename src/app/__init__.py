"""Núcleo do cliente: sessão, contexto, eventos e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- context/: escopo empresa/filial propagado nas requisições
- events/: barramento de eventos observado pela UI
- infra/: implementações concretas de IO (stores)
- observability/: correlation id e métricas via logs
- protocols/: contratos/interfaces
- services/: serviços de aplicação (status de sincronização)
- sessions/: sessão autenticada e permissões

Padrão: app orquestra; api adapta; fsm governa; utils apoia.
"""
