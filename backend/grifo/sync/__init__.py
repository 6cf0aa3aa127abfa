"""
Fila de sincronização offline usada pelo app móvel de vistoria.

Módulos:
- models: Rascunhos e uploads guardados no aparelho
- store: Banco local (SQLite)
- remote: Cliente HTTP da API
- fila: Drenagem, retentativas e gatilhos
"""

from grifo.sync.fila import EstatisticasFila, FilaSincronizacao, ResultadoDrenagem
from grifo.sync.models import EstadoSync
from grifo.sync.remote import ClienteRemoto
from grifo.sync.store import ArmazenamentoLocal

__all__ = [
    "ArmazenamentoLocal",
    "ClienteRemoto",
    "EstadoSync",
    "EstatisticasFila",
    "FilaSincronizacao",
    "ResultadoDrenagem",
]
