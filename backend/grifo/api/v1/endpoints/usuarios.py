"""
Endpoints de Usuários.

Gestão dos usuários de uma empresa e atribuição de papéis.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from grifo.core.dependencies import AcessoAdmin, DBSession, IdentityProviderDep
from grifo.models.usuario import UserRole
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.schemas.usuario import (
    AtribuirPapelRequest,
    UsuarioCreate,
    UsuarioResponse,
    UsuarioUpdate,
)
from grifo.services.usuario_service import UsuarioService

router = APIRouter(prefix="/usuarios", tags=["Usuários"])


@router.post(
    "",
    response_model=APIResponse[UsuarioResponse],
    status_code=status.HTTP_201_CREATED,
)
async def criar_usuario(
    dados: UsuarioCreate,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[UsuarioResponse]:
    usuario = await UsuarioService(db, ctx).criar(dados)
    return APIResponse(
        success=True,
        data=UsuarioResponse.model_validate(usuario),
        message="Usuário criado com sucesso",
    )


@router.get("", response_model=PaginatedResponse[UsuarioResponse])
async def listar_usuarios(
    db: DBSession,
    ctx: AcessoAdmin,
    role: UserRole | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[UsuarioResponse]:
    usuarios, total = await UsuarioService(db, ctx).listar(role, skip, limit)
    return PaginatedResponse(
        success=True,
        data=[UsuarioResponse.model_validate(u) for u in usuarios],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )


@router.post("/atribuir-papel", response_model=APIResponse[UsuarioResponse])
async def atribuir_papel(
    dados: AtribuirPapelRequest,
    db: DBSession,
    ctx: AcessoAdmin,
    identity_provider: IdentityProviderDep,
) -> APIResponse[UsuarioResponse]:
    """
    Atribui papel e empresa a um usuário do Firebase (somente superadmin).

    Cria o perfil na primeira chamada e atualiza nas seguintes.
    """
    usuario = await UsuarioService(db, ctx).atribuir_papel(dados, identity_provider)
    return APIResponse(
        success=True,
        data=UsuarioResponse.model_validate(usuario),
        message="Papel atribuído com sucesso",
    )


@router.get("/{usuario_id}", response_model=APIResponse[UsuarioResponse])
async def obter_usuario(
    usuario_id: UUID,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[UsuarioResponse]:
    usuario = await UsuarioService(db, ctx).obter(usuario_id)
    return APIResponse(success=True, data=UsuarioResponse.model_validate(usuario))


@router.patch("/{usuario_id}", response_model=APIResponse[UsuarioResponse])
async def atualizar_usuario(
    usuario_id: UUID,
    dados: UsuarioUpdate,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[UsuarioResponse]:
    usuario = await UsuarioService(db, ctx).atualizar(usuario_id, dados)
    return APIResponse(success=True, data=UsuarioResponse.model_validate(usuario))
