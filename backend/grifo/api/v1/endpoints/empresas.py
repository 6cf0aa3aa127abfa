"""
Endpoints de Empresas.

Administração das empresas clientes da plataforma (somente superadmin).
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from grifo.core.dependencies import AcessoSuperadmin, DBSession
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.schemas.empresa import EmpresaCreate, EmpresaResponse, EmpresaUpdate, EmpresaUso
from grifo.services.empresa_service import EmpresaService

router = APIRouter(prefix="/empresas", tags=["Empresas"])


@router.post(
    "",
    response_model=APIResponse[EmpresaResponse],
    status_code=status.HTTP_201_CREATED,
)
async def criar_empresa(
    dados: EmpresaCreate,
    db: DBSession,
    ctx: AcessoSuperadmin,
) -> APIResponse[EmpresaResponse]:
    empresa = await EmpresaService(db, ctx).criar(dados)
    return APIResponse(
        success=True,
        data=EmpresaResponse.model_validate(empresa),
        message="Empresa criada com sucesso",
    )


@router.get("", response_model=PaginatedResponse[EmpresaResponse])
async def listar_empresas(
    db: DBSession,
    ctx: AcessoSuperadmin,
    ativa: bool | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[EmpresaResponse]:
    empresas, total = await EmpresaService(db, ctx).listar(ativa, skip, limit)
    return PaginatedResponse(
        success=True,
        data=[EmpresaResponse.model_validate(e) for e in empresas],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )


@router.get("/{empresa_id}", response_model=APIResponse[EmpresaResponse])
async def obter_empresa(
    empresa_id: UUID,
    db: DBSession,
    ctx: AcessoSuperadmin,
) -> APIResponse[EmpresaResponse]:
    empresa = await EmpresaService(db, ctx).obter(empresa_id)
    return APIResponse(success=True, data=EmpresaResponse.model_validate(empresa))


@router.patch("/{empresa_id}", response_model=APIResponse[EmpresaResponse])
async def atualizar_empresa(
    empresa_id: UUID,
    dados: EmpresaUpdate,
    db: DBSession,
    ctx: AcessoSuperadmin,
) -> APIResponse[EmpresaResponse]:
    empresa = await EmpresaService(db, ctx).atualizar(empresa_id, dados)
    return APIResponse(success=True, data=EmpresaResponse.model_validate(empresa))


@router.post("/{empresa_id}/desativar", response_model=APIResponse[EmpresaResponse])
async def desativar_empresa(
    empresa_id: UUID,
    db: DBSession,
    ctx: AcessoSuperadmin,
) -> APIResponse[EmpresaResponse]:
    """Desativa a empresa; usuários dela deixam de operar."""
    empresa = await EmpresaService(db, ctx).desativar(empresa_id)
    return APIResponse(
        success=True,
        data=EmpresaResponse.model_validate(empresa),
        message="Empresa desativada",
    )


@router.post("/{empresa_id}/reativar", response_model=APIResponse[EmpresaResponse])
async def reativar_empresa(
    empresa_id: UUID,
    db: DBSession,
    ctx: AcessoSuperadmin,
) -> APIResponse[EmpresaResponse]:
    empresa = await EmpresaService(db, ctx).reativar(empresa_id)
    return APIResponse(
        success=True,
        data=EmpresaResponse.model_validate(empresa),
        message="Empresa reativada",
    )


@router.get("/{empresa_id}/uso", response_model=APIResponse[EmpresaUso])
async def uso_empresa(
    empresa_id: UUID,
    db: DBSession,
    ctx: AcessoSuperadmin,
) -> APIResponse[EmpresaUso]:
    """Cota de armazenamento e contagens da empresa."""
    return APIResponse(success=True, data=await EmpresaService(db, ctx).uso(empresa_id))
