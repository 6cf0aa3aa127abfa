"""
Endpoints de Solicitações de Vistoria (lado da empresa).
"""

from uuid import UUID

from fastapi import APIRouter, Query

from grifo.core.dependencies import AcessoAdmin, DBSession
from grifo.models.cliente import StatusSolicitacao
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.schemas.cliente import SolicitacaoDecisao, SolicitacaoResponse
from grifo.services.cliente_service import SolicitacaoService

router = APIRouter(prefix="/solicitacoes", tags=["Solicitações"])


@router.get("", response_model=PaginatedResponse[SolicitacaoResponse])
async def listar_solicitacoes(
    db: DBSession,
    ctx: AcessoAdmin,
    status_solicitacao: StatusSolicitacao | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[SolicitacaoResponse]:
    solicitacoes, total = await SolicitacaoService(db, ctx).listar(
        status_solicitacao, skip, limit
    )
    return PaginatedResponse(
        success=True,
        data=[SolicitacaoResponse.model_validate(s) for s in solicitacoes],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )


@router.get("/{solicitacao_id}", response_model=APIResponse[SolicitacaoResponse])
async def obter_solicitacao(
    solicitacao_id: UUID,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[SolicitacaoResponse]:
    solicitacao = await SolicitacaoService(db, ctx).obter(solicitacao_id)
    return APIResponse(success=True, data=SolicitacaoResponse.model_validate(solicitacao))


@router.post("/{solicitacao_id}/decisao", response_model=APIResponse[SolicitacaoResponse])
async def decidir_solicitacao(
    solicitacao_id: UUID,
    dados: SolicitacaoDecisao,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[SolicitacaoResponse]:
    """Aprova, rejeita ou pede alterações; o cliente é notificado."""
    solicitacao = await SolicitacaoService(db, ctx).decidir(solicitacao_id, dados)
    return APIResponse(success=True, data=SolicitacaoResponse.model_validate(solicitacao))
