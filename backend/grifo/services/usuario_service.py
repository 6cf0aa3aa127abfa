"""
Service de Usuários e atribuição de papéis.
"""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso, exigir_papel, garantir_empresa_ativa
from grifo.core.exceptions import (
    FirebaseAuthError,
    InsufficientPermissionsError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from grifo.core.firebase_auth import IdentityProvider
from grifo.core.security import get_password_hash
from grifo.models.usuario import Usuario, UserRole
from grifo.repositories.usuario_repository import UsuarioRepository
from grifo.schemas.usuario import AtribuirPapelRequest, UsuarioCreate, UsuarioUpdate
from grifo.services.auditoria_service import AuditoriaService
from grifo.services.base import TenantService

logger = structlog.get_logger()


class UsuarioService(TenantService):
    """Service para operações com Usuário dentro de uma empresa."""

    def __init__(self, db: AsyncSession, ctx: ContextoAcesso):
        super().__init__(db, ctx)
        self._repo = UsuarioRepository(db, ctx.empresa_id)
        self._auditoria = AuditoriaService(db)

    async def listar(
        self,
        role: UserRole | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[list[Usuario], int]:
        itens = await self._repo.listar(role=role, skip=skip, limit=limit)
        return itens, await self._repo.count_por_papel(role)

    async def obter(self, usuario_id: UUID) -> Usuario:
        usuario = await self._repo.get_by_id(usuario_id)
        if usuario is None:
            raise ResourceNotFoundError("Usuário", usuario_id)
        return usuario

    async def criar(self, dados: UsuarioCreate) -> Usuario:
        """
        Cria usuário na empresa alvo.

        Admin não cria superadmin nem outro admin fora da própria empresa.
        """
        empresa_id = self._exigir_empresa()
        if dados.role == UserRole.SUPERADMIN:
            raise InsufficientPermissionsError("criar superadmin (use a atribuição de papel)")

        if await UsuarioRepository(self._db).get_by_email(dados.email):
            raise ResourceAlreadyExistsError("Usuario", "email", dados.email)

        usuario_data = dados.model_dump(exclude={"password"})
        if dados.password:
            usuario_data["hashed_password"] = get_password_hash(dados.password)

        try:
            usuario = await self._repo.create(empresa_id=empresa_id, **usuario_data)
        except IntegrityError:
            await self._db.rollback()
            raise ResourceAlreadyExistsError("Usuario", "email", dados.email)

        logger.info("Usuário criado", usuario_id=str(usuario.id), role=usuario.role.value)
        await self._auditoria.registrar(
            self._ctx,
            "usuario.criar",
            "usuario",
            usuario.id,
            empresa_id=empresa_id,
            detalhes={"role": usuario.role.value},
            preservar=(usuario,),
        )
        return usuario

    async def atualizar(self, usuario_id: UUID, dados: UsuarioUpdate) -> Usuario:
        await self.obter(usuario_id)
        return await self._repo.update(usuario_id, **dados.model_dump(exclude_unset=True))

    async def atribuir_papel(
        self,
        dados: AtribuirPapelRequest,
        identity_provider: IdentityProvider,
    ) -> Usuario:
        """
        Atribui papel e empresa a uma identidade do provedor.

        1. Confere que a empresa existe e está ativa (exceto superadmin)
        2. Confere que o uid existe no provedor de identidade
        3. Cria ou atualiza o perfil em um único upsert
        4. Espelha papel/empresa nos claims do provedor (best-effort)
        """
        exigir_papel(self._ctx, (UserRole.SUPERADMIN,))

        empresa_id: UUID | None = None
        if dados.role != UserRole.SUPERADMIN:
            if dados.empresa_id is None:
                raise ValidationError("empresa_id é obrigatório para este papel", field="empresa_id")
            await garantir_empresa_ativa(self._db, dados.empresa_id)
            empresa_id = dados.empresa_id

        identidade = await identity_provider.get_user(dados.firebase_uid)
        if identidade is None:
            raise ResourceNotFoundError("Usuário do provedor de identidade", dados.firebase_uid)

        email = identidade.email or f"{dados.firebase_uid}@sem-email.invalid"
        nome = dados.nome or identidade.nome or email.split("@")[0]

        try:
            usuario = await UsuarioRepository(self._db).upsert_papel(
                firebase_uid=dados.firebase_uid,
                email=email,
                nome=nome,
                role=dados.role,
                empresa_id=empresa_id,
            )
        except IntegrityError:
            # Email já pertence a outro perfil
            await self._db.rollback()
            raise ResourceAlreadyExistsError("Usuario", "email", email)

        logger.info(
            "Papel atribuído",
            usuario_id=str(usuario.id),
            firebase_uid=dados.firebase_uid,
            role=dados.role.value,
            empresa_id=str(empresa_id) if empresa_id else None,
        )

        await self._espelhar_claims(identity_provider, usuario)
        await self._auditoria.registrar(
            self._ctx,
            "usuario.atribuir_papel",
            "usuario",
            usuario.id,
            empresa_id=empresa_id,
            detalhes={"role": dados.role.value, "firebase_uid": dados.firebase_uid},
            preservar=(usuario,),
        )
        return usuario

    async def _espelhar_claims(
        self,
        identity_provider: IdentityProvider,
        usuario: Usuario,
    ) -> None:
        claims = {
            "role": usuario.role.value,
            "empresa_id": str(usuario.empresa_id) if usuario.empresa_id else None,
        }
        try:
            await identity_provider.update_claims(usuario.firebase_uid, claims)
        except FirebaseAuthError as e:
            logger.warning(
                "Falha ao espelhar claims no provedor de identidade",
                firebase_uid=usuario.firebase_uid,
                error=e.message,
            )
