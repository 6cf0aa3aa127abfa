"""
Schemas dos Relatórios.
"""

from datetime import datetime
from uuid import UUID

from grifo.schemas.base import BaseSchema
from grifo.schemas.cliente import SolicitacaoResponse
from grifo.schemas.dashboard import VistoriasPorStatus
from grifo.schemas.vistoria import VistoriaResponse


class Periodo(BaseSchema):
    data_inicio: datetime | None = None
    data_fim: datetime | None = None


class VistoriasPorVistoriador(BaseSchema):
    vistoriador_id: UUID
    nome: str
    total: int


class EstatisticasVistorias(BaseSchema):
    total: int
    por_status: VistoriasPorStatus
    por_vistoriador: list[VistoriasPorVistoriador]
    # Laudos emitidos (finalizadas + contestadas) sobre o total
    taxa_finalizacao: float


class RelatorioVistorias(BaseSchema):
    """Vistorias do período com indicadores agregados."""

    empresa_id: UUID
    periodo: Periodo
    vistorias: list[VistoriaResponse]
    estatisticas: EstatisticasVistorias


class EstatisticasSolicitacoes(BaseSchema):
    total: int
    por_status: dict[str, int]
    por_urgencia: dict[str, int]
    # Chave no formato AAAA-MM
    por_mes: dict[str, int]


class RelatorioSolicitacoes(BaseSchema):
    """Solicitações do período com indicadores agregados."""

    empresa_id: UUID
    periodo: Periodo
    solicitacoes: list[SolicitacaoResponse]
    estatisticas: EstatisticasSolicitacoes
