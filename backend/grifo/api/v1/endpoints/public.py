"""
Endpoints públicos (sem autenticação).

Cadastro de cliente, envio de solicitação, caixa de notificações do
cliente e contestação de laudo por token.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from grifo.core.dependencies import DBSession
from grifo.models.notificacao import TipoDestinatario
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.schemas.cliente import (
    ClienteCreate,
    ClienteResponse,
    SolicitacaoCreate,
    SolicitacaoResponse,
)
from grifo.schemas.contestacao import ContestacaoCreate, ContestacaoPublica, ContestacaoResponse
from grifo.schemas.notificacao import NotificacaoContagem, NotificacaoResponse
from grifo.services.cliente_service import AtendimentoPublicoService
from grifo.services.contestacao_service import ContestacaoPublicaService
from grifo.services.notificacao_service import NotificacaoService

router = APIRouter(prefix="/public", tags=["Área Pública"])


@router.post(
    "/clientes",
    response_model=APIResponse[ClienteResponse],
    status_code=status.HTTP_201_CREATED,
)
async def cadastrar_cliente(
    dados: ClienteCreate,
    db: DBSession,
) -> APIResponse[ClienteResponse]:
    cliente = await AtendimentoPublicoService(db).cadastrar_cliente(dados)
    return APIResponse(
        success=True,
        data=ClienteResponse.model_validate(cliente),
        message="Cadastro realizado com sucesso",
    )


@router.post(
    "/solicitacoes",
    response_model=APIResponse[SolicitacaoResponse],
    status_code=status.HTTP_201_CREATED,
)
async def solicitar_vistoria(
    dados: SolicitacaoCreate,
    db: DBSession,
) -> APIResponse[SolicitacaoResponse]:
    """Envia solicitação de vistoria; os administradores são notificados."""
    solicitacao = await AtendimentoPublicoService(db).solicitar_vistoria(dados)
    return APIResponse(
        success=True,
        data=SolicitacaoResponse.model_validate(solicitacao),
        message="Solicitação enviada",
    )


# === NOTIFICAÇÕES DO CLIENTE ===

@router.get(
    "/clientes/{cliente_id}/notificacoes",
    response_model=PaginatedResponse[NotificacaoResponse],
)
async def listar_notificacoes_cliente(
    cliente_id: UUID,
    db: DBSession,
    apenas_nao_lidas: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> PaginatedResponse[NotificacaoResponse]:
    cliente = await AtendimentoPublicoService(db).obter_cliente(cliente_id)
    notificacoes, total = await NotificacaoService(db, cliente.empresa_id).listar(
        TipoDestinatario.CLIENTE, cliente.id, apenas_nao_lidas, skip, limit
    )
    return PaginatedResponse(
        success=True,
        data=[NotificacaoResponse.model_validate(n) for n in notificacoes],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )


@router.get(
    "/clientes/{cliente_id}/notificacoes/count",
    response_model=APIResponse[NotificacaoContagem],
)
async def contar_notificacoes_cliente(
    cliente_id: UUID,
    db: DBSession,
) -> APIResponse[NotificacaoContagem]:
    cliente = await AtendimentoPublicoService(db).obter_cliente(cliente_id)
    total = await NotificacaoService(db, cliente.empresa_id).contar_nao_lidas(
        TipoDestinatario.CLIENTE, cliente.id
    )
    return APIResponse(success=True, data=NotificacaoContagem(nao_lidas=total))


@router.post(
    "/clientes/{cliente_id}/notificacoes/lidas",
    response_model=APIResponse[NotificacaoContagem],
)
async def marcar_notificacoes_cliente_como_lidas(
    cliente_id: UUID,
    db: DBSession,
) -> APIResponse[NotificacaoContagem]:
    cliente = await AtendimentoPublicoService(db).obter_cliente(cliente_id)
    await NotificacaoService(db, cliente.empresa_id).marcar_todas_como_lidas(
        TipoDestinatario.CLIENTE, cliente.id
    )
    return APIResponse(success=True, data=NotificacaoContagem(nao_lidas=0))


@router.post(
    "/clientes/{cliente_id}/notificacoes/{notificacao_id}/lida",
    response_model=APIResponse[NotificacaoResponse],
)
async def marcar_notificacao_cliente_como_lida(
    cliente_id: UUID,
    notificacao_id: UUID,
    db: DBSession,
) -> APIResponse[NotificacaoResponse]:
    cliente = await AtendimentoPublicoService(db).obter_cliente(cliente_id)
    notificacao = await NotificacaoService(db, cliente.empresa_id).marcar_como_lida(
        notificacao_id, TipoDestinatario.CLIENTE, cliente.id
    )
    return APIResponse(success=True, data=NotificacaoResponse.model_validate(notificacao))


# === CONTESTAÇÃO ===

@router.get("/contestacao/{token}", response_model=APIResponse[ContestacaoPublica])
async def obter_contestacao(
    token: str,
    db: DBSession,
) -> APIResponse[ContestacaoPublica]:
    """Dados da vistoria para a página de contestação."""
    return APIResponse(success=True, data=await ContestacaoPublicaService(db).obter(token))


@router.post(
    "/contestacao/{token}",
    response_model=APIResponse[ContestacaoResponse],
    status_code=status.HTTP_201_CREATED,
)
async def contestar_laudo(
    token: str,
    dados: ContestacaoCreate,
    db: DBSession,
) -> APIResponse[ContestacaoResponse]:
    """Registra a contestação; o link deixa de valer."""
    contestacao = await ContestacaoPublicaService(db).contestar(token, dados)
    return APIResponse(
        success=True,
        data=ContestacaoResponse.model_validate(contestacao),
        message="Contestação registrada",
    )
