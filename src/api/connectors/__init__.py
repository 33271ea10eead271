"""Connectors: adapters de borda para APIs externas.

Estrutura:
- backend/: API REST do MediBill (pipeline, prontidão, realtime, endpoints)
"""

__all__: list[str] = []
