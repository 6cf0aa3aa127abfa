"""
Schemas do Dashboard.
"""

from uuid import UUID

from grifo.schemas.base import BaseSchema


class VistoriasPorStatus(BaseSchema):
    rascunho: int = 0
    em_andamento: int = 0
    finalizada: int = 0
    contestada: int = 0


class DashboardStats(BaseSchema):
    """Indicadores de uma empresa."""

    empresa_id: UUID
    total_imoveis: int
    total_vistorias: int
    vistorias_por_status: VistoriasPorStatus
    vistorias_mes: int
    contestacoes_abertas: int
    solicitacoes_pendentes: int
    # Percentuais (0.0 quando não há vistorias)
    taxa_finalizacao: float
    taxa_contestacao: float
    storage_mb: int
