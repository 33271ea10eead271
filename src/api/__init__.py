"""API: camada de borda com o backend REST.

Responsabilidades:
- Montar e enviar requisições ao backend
- Classificar respostas e falhas de transporte em erros tipados
- Consumir o stream de notificações do servidor

Subpastas:
- connectors/: adapters HTTP e de stream

NÃO PODE conter: regras de sessão, persistência, orquestração.
"""
