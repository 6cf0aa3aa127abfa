"""
Gate de autorização e multi-tenancy.

Toda requisição autenticada passa por aqui: resolve a credencial para
um usuário, confere o papel exigido pela operação e resolve a empresa
alvo. O resultado é um ``ContextoAcesso`` imutável que é passado
explicitamente para os serviços; não existe "usuário atual" global.
"""

import dataclasses
from collections.abc import Iterable
from contextlib import suppress
from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import (
    AuthenticationError,
    InsufficientPermissionsError,
    InvalidTokenError,
    ResourceNotFoundError,
    TenantAccessError,
    TenantInactiveError,
)
from grifo.core.firebase_auth import IdentityProvider
from grifo.core.security import verify_token
from grifo.models.empresa import Empresa
from grifo.models.usuario import Usuario, UserRole
from grifo.repositories.empresa_repository import EmpresaRepository
from grifo.repositories.usuario_repository import UsuarioRepository

logger = structlog.get_logger()


@dataclass(frozen=True)
class ContextoAcesso:
    """
    Identidade resolvida de uma requisição.

    ``empresa_usuario_id`` é a empresa do usuário; ``empresa_id`` é a
    empresa alvo da operação. Para superadmin sem empresa alvo,
    ``empresa_id`` é None e as consultas não são filtradas.
    """

    usuario_id: UUID
    email: str
    role: UserRole
    firebase_uid: str | None = None
    empresa_usuario_id: UUID | None = None
    empresa_id: UUID | None = None

    @classmethod
    def do_usuario(cls, usuario: Usuario) -> "ContextoAcesso":
        return cls(
            usuario_id=usuario.id,
            email=usuario.email,
            role=usuario.role,
            firebase_uid=usuario.firebase_uid,
            empresa_usuario_id=usuario.empresa_id,
            empresa_id=usuario.empresa_id,
        )

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    def tem_papel(self, *papeis: UserRole) -> bool:
        return self.role in papeis

    def com_empresa(self, empresa_id: UUID | None) -> "ContextoAcesso":
        return dataclasses.replace(self, empresa_id=empresa_id)


async def autenticar(
    token: str | None,
    db: AsyncSession,
    identity_provider: IdentityProvider,
) -> Usuario:
    """
    Resolve a credencial bearer para um usuário ativo.

    Tenta primeiro o JWT local (sub = id do usuário) e depois o
    provedor de identidade (Firebase), buscando o usuário pelo uid.

    Raises:
        AuthenticationError: credencial ausente, inválida ou sem usuário
    """
    if not token:
        raise AuthenticationError("Token de autenticação não fornecido")

    repo = UsuarioRepository(db)

    payload = verify_token(token)
    if payload is not None:
        try:
            usuario_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise InvalidTokenError()
        usuario = await repo.get_by_id(usuario_id)
    else:
        identidade = await identity_provider.resolve(token)
        usuario = await repo.get_by_firebase_uid(identidade.uid)

    if usuario is None:
        raise AuthenticationError("Usuário não encontrado no sistema")
    if not usuario.is_active:
        raise AuthenticationError("Usuário inativo")

    await _registrar_login(repo, usuario)
    return usuario


async def _registrar_login(repo: UsuarioRepository, usuario: Usuario) -> None:
    # Falha aqui nunca derruba a requisição
    try:
        await repo.registrar_login(usuario.id)
    except SQLAlchemyError as e:
        # rollback expira o usuário; recarrega para montar o contexto
        with suppress(SQLAlchemyError):
            await repo.db.rollback()
            await repo.db.refresh(usuario)
        logger.warning(
            "Falha ao registrar último login",
            usuario_id=str(usuario.id),
            error=str(e),
        )


def exigir_papel(ctx: ContextoAcesso, papeis: Iterable[UserRole]) -> None:
    """
    Raises:
        InsufficientPermissionsError: papel fora do conjunto permitido
    """
    permitidos = tuple(papeis)
    if ctx.role not in permitidos:
        raise InsufficientPermissionsError(
            f"requer papel {', '.join(p.value for p in permitidos)}"
        )


def resolver_empresa_alvo(
    ctx: ContextoAcesso,
    empresa_id: UUID | None,
) -> ContextoAcesso:
    """
    Resolve a empresa alvo a partir de um parâmetro explícito.

    Sem parâmetro, o alvo é a empresa do próprio usuário. Apenas
    superadmin pode nomear outra empresa.

    Raises:
        TenantAccessError: empresa explícita diferente da do usuário
    """
    if empresa_id is None:
        return ctx.com_empresa(ctx.empresa_usuario_id)

    if ctx.is_superadmin:
        return ctx.com_empresa(empresa_id)

    if ctx.empresa_usuario_id is None or empresa_id != ctx.empresa_usuario_id:
        logger.warning(
            "Acesso a outra empresa negado",
            usuario_id=str(ctx.usuario_id),
            empresa_solicitada=str(empresa_id),
        )
        raise TenantAccessError()

    return ctx.com_empresa(empresa_id)


async def garantir_empresa_ativa(
    db: AsyncSession,
    empresa_id: UUID,
    permitir_inativa: bool = False,
) -> Empresa:
    """
    Confere que a empresa existe e está ativa.

    ``permitir_inativa`` só é usado pela reativação e pela
    administração de empresas feita pelo superadmin.

    Raises:
        ResourceNotFoundError: empresa inexistente
        TenantInactiveError: empresa desativada
    """
    empresa = await EmpresaRepository(db).get_by_id(empresa_id)
    if empresa is None:
        raise ResourceNotFoundError("Empresa", empresa_id)
    if not empresa.ativa and not permitir_inativa:
        raise TenantInactiveError(empresa_id)
    return empresa


async def contexto_da_requisicao(
    token: str | None,
    db: AsyncSession,
    identity_provider: IdentityProvider,
    papeis: Iterable[UserRole] = (),
    empresa_id: UUID | None = None,
    permitir_inativa: bool = False,
) -> ContextoAcesso:
    """Executa todas as etapas do gate para uma requisição."""
    usuario = await autenticar(token, db, identity_provider)
    ctx = ContextoAcesso.do_usuario(usuario)

    papeis = tuple(papeis)
    if papeis:
        exigir_papel(ctx, papeis)

    ctx = resolver_empresa_alvo(ctx, empresa_id)
    if ctx.empresa_id is not None:
        await garantir_empresa_ativa(db, ctx.empresa_id, permitir_inativa)

    structlog.contextvars.bind_contextvars(
        usuario_id=str(ctx.usuario_id),
        empresa_id=str(ctx.empresa_id) if ctx.empresa_id else None,
    )
    return ctx
