"""
Endpoints de Imóveis.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from grifo.core.dependencies import AcessoAdmin, AcessoLeitura, DBSession
from grifo.models.imovel import TipoImovel
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.schemas.imovel import ImovelCreate, ImovelResponse, ImovelUpdate
from grifo.services.imovel_service import ImovelService

router = APIRouter(prefix="/imoveis", tags=["Imóveis"])


@router.post(
    "",
    response_model=APIResponse[ImovelResponse],
    status_code=status.HTTP_201_CREATED,
)
async def criar_imovel(
    dados: ImovelCreate,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[ImovelResponse]:
    imovel = await ImovelService(db, ctx).criar(dados)
    return APIResponse(
        success=True,
        data=ImovelResponse.model_validate(imovel),
        message="Imóvel cadastrado com sucesso",
    )


@router.get("", response_model=PaginatedResponse[ImovelResponse])
async def listar_imoveis(
    db: DBSession,
    ctx: AcessoLeitura,
    q: str | None = Query(None, description="Código, endereço ou proprietário"),
    tipo: TipoImovel | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[ImovelResponse]:
    imoveis, total = await ImovelService(db, ctx).listar(q, tipo, skip, limit)
    return PaginatedResponse(
        success=True,
        data=[ImovelResponse.model_validate(i) for i in imoveis],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )


@router.get("/{imovel_id}", response_model=APIResponse[ImovelResponse])
async def obter_imovel(
    imovel_id: UUID,
    db: DBSession,
    ctx: AcessoLeitura,
) -> APIResponse[ImovelResponse]:
    imovel = await ImovelService(db, ctx).obter(imovel_id)
    return APIResponse(success=True, data=ImovelResponse.model_validate(imovel))


@router.patch("/{imovel_id}", response_model=APIResponse[ImovelResponse])
async def atualizar_imovel(
    imovel_id: UUID,
    dados: ImovelUpdate,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[ImovelResponse]:
    imovel = await ImovelService(db, ctx).atualizar(imovel_id, dados)
    return APIResponse(success=True, data=ImovelResponse.model_validate(imovel))
