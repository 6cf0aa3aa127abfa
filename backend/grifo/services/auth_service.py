"""
Service de Autenticação.

Gerencia login local e troca de token Firebase por JWT local.
"""

from datetime import timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import settings
from grifo.core.exceptions import AuthenticationError
from grifo.core.firebase_auth import IdentityProvider
from grifo.core.security import create_access_token, verify_password
from grifo.models.usuario import Usuario
from grifo.repositories.usuario_repository import UsuarioRepository
from grifo.schemas.usuario import LoginResponse, UsuarioResponse

logger = structlog.get_logger()


class AuthService:
    """
    Service de autenticação.

    Suporta autenticação local (JWT) e Firebase Auth.
    """

    def __init__(self, db: AsyncSession):
        self._db = db
        self._usuario_repo = UsuarioRepository(db)

    def _emitir_token(self, usuario: Usuario) -> LoginResponse:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            subject=usuario.id,
            expires_delta=expires_delta,
            additional_claims={
                "role": usuario.role.value,
                "empresa_id": str(usuario.empresa_id) if usuario.empresa_id else None,
            },
        )
        return LoginResponse(
            access_token=access_token,
            expires_in=int(expires_delta.total_seconds()),
            user=UsuarioResponse.model_validate(usuario),
        )

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Login com email e senha.

        Raises:
            AuthenticationError: Credenciais inválidas ou usuário inativo
        """
        usuario = await self._usuario_repo.get_by_email(email)

        if (
            usuario is None
            or not usuario.hashed_password
            or not verify_password(password, usuario.hashed_password)
        ):
            logger.warning("Tentativa de login com credenciais inválidas", email=email)
            raise AuthenticationError("Email ou senha incorretos")

        if not usuario.is_active:
            raise AuthenticationError("Usuário inativo")

        logger.info("Login realizado", usuario_id=str(usuario.id))
        return self._emitir_token(usuario)

    async def login_firebase(
        self,
        id_token: str,
        identity_provider: IdentityProvider,
    ) -> LoginResponse:
        """Troca um token do Firebase por um JWT local."""
        identidade = await identity_provider.resolve(id_token)
        usuario = await self._usuario_repo.get_by_firebase_uid(identidade.uid)

        if usuario is None:
            raise AuthenticationError("Usuário não encontrado no sistema")
        if not usuario.is_active:
            raise AuthenticationError("Usuário inativo")

        logger.info("Login Firebase realizado", usuario_id=str(usuario.id))
        return self._emitir_token(usuario)
