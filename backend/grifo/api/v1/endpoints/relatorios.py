"""
Endpoints de Relatórios.

Superadmin informa a empresa via ``?empresa_id=``.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query

from grifo.core.dependencies import AcessoAdmin, DBSession
from grifo.models.cliente import StatusSolicitacao
from grifo.models.vistoria import StatusVistoria
from grifo.schemas.base import APIResponse
from grifo.schemas.relatorio import RelatorioSolicitacoes, RelatorioVistorias
from grifo.services.relatorio_service import RelatorioService

router = APIRouter(prefix="/relatorios", tags=["Relatórios"])


@router.get("/vistorias", response_model=APIResponse[RelatorioVistorias])
async def relatorio_vistorias(
    db: DBSession,
    ctx: AcessoAdmin,
    data_inicio: datetime | None = Query(None),
    data_fim: datetime | None = Query(None),
    status_vistoria: StatusVistoria | None = Query(None, alias="status"),
    vistoriador_id: UUID | None = Query(None),
    cliente_id: UUID | None = Query(None),
) -> APIResponse[RelatorioVistorias]:
    relatorio = await RelatorioService(db, ctx).vistorias(
        data_inicio=data_inicio,
        data_fim=data_fim,
        status=status_vistoria,
        vistoriador_id=vistoriador_id,
        cliente_id=cliente_id,
    )
    return APIResponse(success=True, data=relatorio)


@router.get("/solicitacoes", response_model=APIResponse[RelatorioSolicitacoes])
async def relatorio_solicitacoes(
    db: DBSession,
    ctx: AcessoAdmin,
    data_inicio: datetime | None = Query(None),
    data_fim: datetime | None = Query(None),
    status_solicitacao: StatusSolicitacao | None = Query(None, alias="status"),
    cliente_id: UUID | None = Query(None),
) -> APIResponse[RelatorioSolicitacoes]:
    """Solicitações por status, urgência e mês."""
    relatorio = await RelatorioService(db, ctx).solicitacoes(
        data_inicio=data_inicio,
        data_fim=data_fim,
        status=status_solicitacao,
        cliente_id=cliente_id,
    )
    return APIResponse(success=True, data=relatorio)
