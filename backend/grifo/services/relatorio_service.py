"""
Service de Relatórios.

Consolida vistorias e solicitações de um período dentro do escopo
de uma empresa.
"""

from collections import Counter
from datetime import datetime
from uuid import UUID

import structlog

from grifo.core.autorizacao import garantir_empresa_ativa
from grifo.core.exceptions import ValidationError
from grifo.models.cliente import StatusSolicitacao
from grifo.models.vistoria import StatusVistoria
from grifo.repositories.cliente_repository import SolicitacaoRepository
from grifo.repositories.usuario_repository import UsuarioRepository
from grifo.repositories.vistoria_repository import VistoriaRepository
from grifo.schemas.cliente import SolicitacaoResponse
from grifo.schemas.dashboard import VistoriasPorStatus
from grifo.schemas.relatorio import (
    EstatisticasSolicitacoes,
    EstatisticasVistorias,
    Periodo,
    RelatorioSolicitacoes,
    RelatorioVistorias,
    VistoriasPorVistoriador,
)
from grifo.schemas.vistoria import VistoriaResponse
from grifo.services.base import TenantService
from grifo.services.dashboard_service import _percentual

logger = structlog.get_logger()


def _validar_periodo(data_inicio: datetime | None, data_fim: datetime | None) -> Periodo:
    if data_inicio and data_fim and data_inicio > data_fim:
        raise ValidationError(
            "data_inicio deve ser anterior a data_fim",
            field="data_inicio",
        )
    return Periodo(data_inicio=data_inicio, data_fim=data_fim)


class RelatorioService(TenantService):
    """Relatórios gerenciais da empresa."""

    async def _empresa_alvo(self) -> UUID:
        empresa_id = self._exigir_empresa()
        await garantir_empresa_ativa(self._db, empresa_id)
        return empresa_id

    async def vistorias(
        self,
        data_inicio: datetime | None = None,
        data_fim: datetime | None = None,
        status: StatusVistoria | None = None,
        vistoriador_id: UUID | None = None,
        cliente_id: UUID | None = None,
    ) -> RelatorioVistorias:
        """
        Relatório de vistorias criadas no período.

        Agrupa por status e por vistoriador; a taxa de finalização
        segue a mesma regra do dashboard.
        """
        periodo = _validar_periodo(data_inicio, data_fim)
        empresa_id = await self._empresa_alvo()

        vistorias = await VistoriaRepository(self._db, empresa_id).relatorio(
            data_inicio=data_inicio,
            data_fim=data_fim,
            status=status,
            vistoriador_id=vistoriador_id,
            cliente_id=cliente_id,
        )

        por_status = Counter(v.status for v in vistorias)
        por_vistoriador = Counter(v.vistoriador_id for v in vistorias)
        nomes = await UsuarioRepository(self._db, empresa_id).nomes(list(por_vistoriador))
        emitidas = por_status[StatusVistoria.FINALIZADA] + por_status[StatusVistoria.CONTESTADA]

        logger.info(
            "Relatório de vistorias gerado",
            empresa_id=str(empresa_id),
            total=len(vistorias),
        )

        return RelatorioVistorias(
            empresa_id=empresa_id,
            periodo=periodo,
            vistorias=[VistoriaResponse.model_validate(v) for v in vistorias],
            estatisticas=EstatisticasVistorias(
                total=len(vistorias),
                por_status=VistoriasPorStatus(
                    **{s.value: quantidade for s, quantidade in por_status.items()}
                ),
                por_vistoriador=[
                    VistoriasPorVistoriador(
                        vistoriador_id=usuario_id,
                        nome=nomes.get(usuario_id, "Desconhecido"),
                        total=quantidade,
                    )
                    for usuario_id, quantidade in por_vistoriador.most_common()
                ],
                taxa_finalizacao=_percentual(emitidas, len(vistorias)),
            ),
        )

    async def solicitacoes(
        self,
        data_inicio: datetime | None = None,
        data_fim: datetime | None = None,
        status: StatusSolicitacao | None = None,
        cliente_id: UUID | None = None,
    ) -> RelatorioSolicitacoes:
        """Relatório de solicitações recebidas no período."""
        periodo = _validar_periodo(data_inicio, data_fim)
        empresa_id = await self._empresa_alvo()

        solicitacoes = await SolicitacaoRepository(self._db, empresa_id).relatorio(
            data_inicio=data_inicio,
            data_fim=data_fim,
            status=status,
            cliente_id=cliente_id,
        )

        logger.info(
            "Relatório de solicitações gerado",
            empresa_id=str(empresa_id),
            total=len(solicitacoes),
        )

        return RelatorioSolicitacoes(
            empresa_id=empresa_id,
            periodo=periodo,
            solicitacoes=[SolicitacaoResponse.model_validate(s) for s in solicitacoes],
            estatisticas=EstatisticasSolicitacoes(
                total=len(solicitacoes),
                por_status=dict(Counter(s.status.value for s in solicitacoes)),
                por_urgencia=dict(Counter(s.urgencia.value for s in solicitacoes)),
                por_mes=dict(
                    sorted(Counter(s.created_at.strftime("%Y-%m") for s in solicitacoes).items())
                ),
            ),
        )
