"""
Service do Dashboard.

Indicadores calculados sempre dentro do escopo de uma empresa.
"""

from grifo.core.autorizacao import garantir_empresa_ativa
from grifo.db.base import utcnow
from grifo.models.vistoria import StatusVistoria
from grifo.repositories.cliente_repository import SolicitacaoRepository
from grifo.repositories.contestacao_repository import ContestacaoRepository
from grifo.repositories.imovel_repository import ImovelRepository
from grifo.repositories.vistoria_repository import VistoriaRepository
from grifo.schemas.dashboard import DashboardStats, VistoriasPorStatus
from grifo.services.base import TenantService


def _percentual(parte: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(parte / total * 100, 2)


class DashboardService(TenantService):
    """Indicadores do painel da empresa."""

    async def estatisticas(self) -> DashboardStats:
        """
        Calcula os indicadores da empresa alvo.

        taxa_finalizacao: laudos emitidos (finalizadas + contestadas)
        sobre o total de vistorias. taxa_contestacao: contestadas sobre
        os laudos emitidos.
        """
        empresa_id = self._exigir_empresa()
        empresa = await garantir_empresa_ativa(self._db, empresa_id)

        vistorias = VistoriaRepository(self._db, empresa_id)
        por_status = await vistorias.count_por_status()
        total = sum(por_status.values())
        finalizadas = por_status.get(StatusVistoria.FINALIZADA, 0)
        contestadas = por_status.get(StatusVistoria.CONTESTADA, 0)
        emitidas = finalizadas + contestadas

        inicio_mes = utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        return DashboardStats(
            empresa_id=empresa_id,
            total_imoveis=await ImovelRepository(self._db, empresa_id).count(),
            total_vistorias=total,
            vistorias_por_status=VistoriasPorStatus(
                **{status.value: quantidade for status, quantidade in por_status.items()}
            ),
            vistorias_mes=await vistorias.count_desde(inicio_mes),
            contestacoes_abertas=await ContestacaoRepository(self._db, empresa_id).count_abertas(),
            solicitacoes_pendentes=await SolicitacaoRepository(
                self._db, empresa_id
            ).count_pendentes(),
            taxa_finalizacao=_percentual(emitidas, total),
            taxa_contestacao=_percentual(contestadas, emitidas),
            storage_mb=empresa.storage_mb,
        )
