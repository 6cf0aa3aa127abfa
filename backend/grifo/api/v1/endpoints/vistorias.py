"""
Endpoints de Vistorias.

Rotas usadas pelo painel e pelo app móvel do vistoriador: criação
idempotente, ambientes, fotos, laudo, finalização e contestações.

Rotas de criação aceitam a chave de idempotência no corpo ou no
header ``Idempotency-Key``. Repetir a chave devolve 200 com o
registro original em vez de 201.
"""

from uuid import UUID

from fastapi import APIRouter, File, Form, Header, Query, Response, UploadFile, status

from grifo.core.dependencies import (
    AcessoAdmin,
    AcessoLeitura,
    AcessoVistoriador,
    DBSession,
    StorageDep,
)
from grifo.models.vistoria import StatusVistoria
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.schemas.contestacao import ContestacaoResponse, LinkContestacaoResponse
from grifo.schemas.vistoria import (
    AmbienteCreate,
    AmbienteResponse,
    FinalizacaoResponse,
    FinalizarVistoriaRequest,
    FotoResponse,
    LaudoUploadResponse,
    VistoriaCreate,
    VistoriaResponse,
    VistoriaStatusUpdate,
    VistoriaUpdate,
)
from grifo.services.contestacao_service import ContestacaoService
from grifo.services.vistoria_service import VistoriaService

router = APIRouter(prefix="/vistorias", tags=["Vistorias"])


def _status_criacao(response: Response, criado: bool) -> None:
    response.status_code = status.HTTP_201_CREATED if criado else status.HTTP_200_OK


# === VISTORIAS ===

@router.post(
    "",
    response_model=APIResponse[VistoriaResponse],
    status_code=status.HTTP_201_CREATED,
)
async def criar_vistoria(
    dados: VistoriaCreate,
    response: Response,
    db: DBSession,
    ctx: AcessoVistoriador,
    storage: StorageDep,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
) -> APIResponse[VistoriaResponse]:
    """Cria vistoria (idempotente pela chave enviada pelo app)."""
    if dados.idempotency_key is None and idempotency_key:
        dados = dados.model_copy(update={"idempotency_key": idempotency_key})

    vistoria, criada = await VistoriaService(db, ctx, storage).criar(dados)
    _status_criacao(response, criada)
    return APIResponse(
        success=True,
        data=VistoriaResponse.model_validate(vistoria),
        message="Vistoria criada com sucesso" if criada else "Vistoria já registrada",
    )


@router.get("", response_model=PaginatedResponse[VistoriaResponse])
async def listar_vistorias(
    db: DBSession,
    ctx: AcessoLeitura,
    status_vistoria: StatusVistoria | None = Query(None, alias="status"),
    imovel_id: UUID | None = Query(None),
    vistoriador_id: UUID | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[VistoriaResponse]:
    vistorias, total = await VistoriaService(db, ctx).listar(
        status_vistoria, imovel_id, vistoriador_id, skip, limit
    )
    return PaginatedResponse(
        success=True,
        data=[VistoriaResponse.model_validate(v) for v in vistorias],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )


@router.get("/{vistoria_id}", response_model=APIResponse[VistoriaResponse])
async def obter_vistoria(
    vistoria_id: UUID,
    db: DBSession,
    ctx: AcessoLeitura,
) -> APIResponse[VistoriaResponse]:
    vistoria = await VistoriaService(db, ctx).obter(vistoria_id)
    return APIResponse(success=True, data=VistoriaResponse.model_validate(vistoria))


@router.patch("/{vistoria_id}", response_model=APIResponse[VistoriaResponse])
async def atualizar_vistoria(
    vistoria_id: UUID,
    dados: VistoriaUpdate,
    db: DBSession,
    ctx: AcessoVistoriador,
) -> APIResponse[VistoriaResponse]:
    """Atualiza agendamento, responsável, cliente ou observações."""
    vistoria = await VistoriaService(db, ctx).atualizar(vistoria_id, dados)
    return APIResponse(success=True, data=VistoriaResponse.model_validate(vistoria))


@router.patch("/{vistoria_id}/status", response_model=APIResponse[VistoriaResponse])
async def alterar_status_vistoria(
    vistoria_id: UUID,
    dados: VistoriaStatusUpdate,
    db: DBSession,
    ctx: AcessoVistoriador,
) -> APIResponse[VistoriaResponse]:
    vistoria = await VistoriaService(db, ctx).alterar_status(vistoria_id, dados.status)
    return APIResponse(success=True, data=VistoriaResponse.model_validate(vistoria))


@router.post("/{vistoria_id}/finalizar", response_model=APIResponse[FinalizacaoResponse])
async def finalizar_vistoria(
    vistoria_id: UUID,
    dados: FinalizarVistoriaRequest,
    db: DBSession,
    ctx: AcessoVistoriador,
) -> APIResponse[FinalizacaoResponse]:
    """
    Finaliza a vistoria com a URL do laudo.

    Repetir a chamada em vistoria finalizada é sucesso e não altera nada.
    """
    vistoria, ja_finalizada = await VistoriaService(db, ctx).finalizar(
        vistoria_id, dados.pdf_url
    )
    return APIResponse(
        success=True,
        data=FinalizacaoResponse(
            vistoria=VistoriaResponse.model_validate(vistoria),
            ja_finalizada=ja_finalizada,
        ),
        message="Vistoria já estava finalizada" if ja_finalizada else "Vistoria finalizada",
    )


# === AMBIENTES ===

@router.post(
    "/{vistoria_id}/ambientes",
    response_model=APIResponse[AmbienteResponse],
    status_code=status.HTTP_201_CREATED,
)
async def criar_ambiente(
    vistoria_id: UUID,
    dados: AmbienteCreate,
    response: Response,
    db: DBSession,
    ctx: AcessoVistoriador,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
) -> APIResponse[AmbienteResponse]:
    if dados.idempotency_key is None and idempotency_key:
        dados = dados.model_copy(update={"idempotency_key": idempotency_key})

    ambiente, criado = await VistoriaService(db, ctx).criar_ambiente(vistoria_id, dados)
    _status_criacao(response, criado)
    return APIResponse(success=True, data=AmbienteResponse.model_validate(ambiente))


@router.get("/{vistoria_id}/ambientes", response_model=APIResponse[list[AmbienteResponse]])
async def listar_ambientes(
    vistoria_id: UUID,
    db: DBSession,
    ctx: AcessoLeitura,
) -> APIResponse[list[AmbienteResponse]]:
    ambientes = await VistoriaService(db, ctx).listar_ambientes(vistoria_id)
    return APIResponse(
        success=True,
        data=[AmbienteResponse.model_validate(a) for a in ambientes],
    )


# === FOTOS E LAUDO ===

@router.post(
    "/{vistoria_id}/fotos",
    response_model=APIResponse[FotoResponse],
    status_code=status.HTTP_201_CREATED,
)
async def enviar_foto(
    vistoria_id: UUID,
    response: Response,
    db: DBSession,
    ctx: AcessoVistoriador,
    storage: StorageDep,
    file: UploadFile = File(..., description="Imagem da foto"),
    ambiente_id: UUID | None = Form(None),
    legenda: str | None = Form(None),
    ordem: int = Form(0),
    idempotency_key: str | None = Form(None),
    idempotency_key_header: str | None = Header(None, alias="Idempotency-Key"),
) -> APIResponse[FotoResponse]:
    """Upload de foto para o storage da empresa."""
    conteudo = await file.read()
    foto, criada = await VistoriaService(db, ctx, storage).enviar_foto(
        vistoria_id,
        conteudo,
        file.filename or "foto.jpg",
        file.content_type or "application/octet-stream",
        ambiente_id=ambiente_id,
        legenda=legenda,
        ordem=ordem,
        idempotency_key=idempotency_key or idempotency_key_header,
    )
    _status_criacao(response, criada)
    return APIResponse(success=True, data=FotoResponse.model_validate(foto))


@router.get("/{vistoria_id}/fotos", response_model=APIResponse[list[FotoResponse]])
async def listar_fotos(
    vistoria_id: UUID,
    db: DBSession,
    ctx: AcessoLeitura,
    ambiente_id: UUID | None = Query(None),
) -> APIResponse[list[FotoResponse]]:
    fotos = await VistoriaService(db, ctx).listar_fotos(vistoria_id, ambiente_id)
    return APIResponse(success=True, data=[FotoResponse.model_validate(f) for f in fotos])


@router.post(
    "/{vistoria_id}/laudo",
    response_model=APIResponse[LaudoUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def enviar_laudo(
    vistoria_id: UUID,
    db: DBSession,
    ctx: AcessoVistoriador,
    storage: StorageDep,
    file: UploadFile = File(..., description="Laudo em PDF"),
) -> APIResponse[LaudoUploadResponse]:
    """Upload do PDF do laudo; a URL devolvida é usada para finalizar."""
    conteudo = await file.read()
    resultado = await VistoriaService(db, ctx, storage).enviar_laudo(
        vistoria_id,
        conteudo,
        file.filename or "laudo.pdf",
        file.content_type or "application/pdf",
    )
    return APIResponse(success=True, data=resultado)


# === CONTESTAÇÕES ===

@router.post(
    "/{vistoria_id}/link-contestacao",
    response_model=APIResponse[LinkContestacaoResponse],
    status_code=status.HTTP_201_CREATED,
)
async def gerar_link_contestacao(
    vistoria_id: UUID,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[LinkContestacaoResponse]:
    """Gera link público de contestação para vistoria finalizada."""
    link = await ContestacaoService(db, ctx).gerar_link(vistoria_id)
    return APIResponse(success=True, data=LinkContestacaoResponse.model_validate(link))


@router.get(
    "/{vistoria_id}/contestacoes",
    response_model=APIResponse[list[ContestacaoResponse]],
)
async def listar_contestacoes(
    vistoria_id: UUID,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[list[ContestacaoResponse]]:
    contestacoes = await ContestacaoService(db, ctx).listar(vistoria_id)
    return APIResponse(
        success=True,
        data=[ContestacaoResponse.model_validate(c) for c in contestacoes],
    )


@router.post(
    "/contestacoes/{contestacao_id}/resolver",
    response_model=APIResponse[ContestacaoResponse],
)
async def resolver_contestacao(
    contestacao_id: UUID,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[ContestacaoResponse]:
    contestacao = await ContestacaoService(db, ctx).resolver(contestacao_id)
    return APIResponse(success=True, data=ContestacaoResponse.model_validate(contestacao))
