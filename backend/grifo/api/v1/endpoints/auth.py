"""
Endpoints de Autenticação.

Rotas para login (local e Firebase) e perfil do usuário autenticado.
"""

from fastapi import APIRouter

from grifo.core.dependencies import Autenticado, DBSession, IdentityProviderDep
from grifo.schemas.base import APIResponse
from grifo.schemas.usuario import (
    FirebaseLoginRequest,
    LoginRequest,
    LoginResponse,
    UsuarioResponse,
)
from grifo.services.auth_service import AuthService
from grifo.services.usuario_service import UsuarioService

router = APIRouter(prefix="/auth", tags=["Autenticação"])


@router.post("/login", response_model=APIResponse[LoginResponse])
async def login(
    request: LoginRequest,
    db: DBSession,
) -> APIResponse[LoginResponse]:
    """
    Login com email e senha.

    Retorna token JWT para autenticação nas demais rotas.
    """
    service = AuthService(db)
    return APIResponse(success=True, data=await service.login(request.email, request.password))


@router.post("/login/firebase", response_model=APIResponse[LoginResponse])
async def login_firebase(
    request: FirebaseLoginRequest,
    db: DBSession,
    identity_provider: IdentityProviderDep,
) -> APIResponse[LoginResponse]:
    """
    Login com token Firebase.

    Valida o token no provedor e retorna o JWT interno.
    """
    service = AuthService(db)
    resultado = await service.login_firebase(request.id_token, identity_provider)
    return APIResponse(success=True, data=resultado)


@router.get("/me", response_model=APIResponse[UsuarioResponse])
async def get_me(
    ctx: Autenticado,
    db: DBSession,
) -> APIResponse[UsuarioResponse]:
    """Retorna o perfil do usuário autenticado."""
    usuario = await UsuarioService(db, ctx.com_empresa(None)).obter(ctx.usuario_id)
    return APIResponse(success=True, data=UsuarioResponse.model_validate(usuario))
