"""
Endpoints de Notificações.

Caixa de entrada do usuário autenticado. A caixa do cliente fica na
área pública.
"""

from uuid import UUID

from fastapi import APIRouter, Query

from grifo.core.dependencies import Autenticado, DBSession
from grifo.models.notificacao import TipoDestinatario
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.schemas.notificacao import NotificacaoContagem, NotificacaoResponse
from grifo.services.notificacao_service import NotificacaoService

router = APIRouter(prefix="/notificacoes", tags=["Notificações"])


@router.get("", response_model=PaginatedResponse[NotificacaoResponse])
async def listar_notificacoes(
    db: DBSession,
    ctx: Autenticado,
    apenas_nao_lidas: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> PaginatedResponse[NotificacaoResponse]:
    """Lista notificações do usuário autenticado."""
    service = NotificacaoService(db, ctx.empresa_id)
    notificacoes, total = await service.listar(
        TipoDestinatario.ADMIN, ctx.usuario_id, apenas_nao_lidas, skip, limit
    )
    return PaginatedResponse(
        success=True,
        data=[NotificacaoResponse.model_validate(n) for n in notificacoes],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )


@router.get("/count", response_model=APIResponse[NotificacaoContagem])
async def contar_nao_lidas(
    db: DBSession,
    ctx: Autenticado,
) -> APIResponse[NotificacaoContagem]:
    """Conta notificações não lidas."""
    service = NotificacaoService(db, ctx.empresa_id)
    total = await service.contar_nao_lidas(TipoDestinatario.ADMIN, ctx.usuario_id)
    return APIResponse(success=True, data=NotificacaoContagem(nao_lidas=total))


@router.post("/lidas", response_model=APIResponse[NotificacaoContagem])
async def marcar_todas_como_lidas(
    db: DBSession,
    ctx: Autenticado,
) -> APIResponse[NotificacaoContagem]:
    service = NotificacaoService(db, ctx.empresa_id)
    await service.marcar_todas_como_lidas(TipoDestinatario.ADMIN, ctx.usuario_id)
    return APIResponse(
        success=True,
        data=NotificacaoContagem(nao_lidas=0),
        message="Notificações marcadas como lidas",
    )


@router.post("/{notificacao_id}/lida", response_model=APIResponse[NotificacaoResponse])
async def marcar_como_lida(
    notificacao_id: UUID,
    db: DBSession,
    ctx: Autenticado,
) -> APIResponse[NotificacaoResponse]:
    service = NotificacaoService(db, ctx.empresa_id)
    notificacao = await service.marcar_como_lida(
        notificacao_id, TipoDestinatario.ADMIN, ctx.usuario_id
    )
    return APIResponse(success=True, data=NotificacaoResponse.model_validate(notificacao))
