"""
Repository do Usuário.
"""

from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.db.base import utcnow
from grifo.models.usuario import Usuario, UserRole
from grifo.repositories.base import MultiTenantRepository


class UsuarioRepository(MultiTenantRepository[Usuario]):
    """
    Repository para operações com Usuário.

    Usuário não herda de MultiTenantBase (superadmin não tem empresa),
    então o filtro de escopo é aplicado aqui.
    """

    def __init__(self, db: AsyncSession, empresa_id: UUID | None = None):
        super().__init__(Usuario, db, empresa_id)

    def _query(self) -> Select:
        query = select(Usuario)
        if self.empresa_id is not None:
            query = query.where(Usuario.empresa_id == self.empresa_id)
        return query

    async def create(self, **kwargs) -> Usuario:
        if self.empresa_id is not None:
            kwargs.setdefault("empresa_id", self.empresa_id)
        instance = Usuario(**kwargs)
        self.db.add(instance)
        await self.db.commit()
        await self.db.refresh(instance)
        return instance

    async def get_by_email(self, email: str) -> Usuario | None:
        result = await self.db.execute(
            self._query().where(Usuario.email == email)
        )
        return result.scalar_one_or_none()

    async def get_by_firebase_uid(self, firebase_uid: str) -> Usuario | None:
        result = await self.db.execute(
            self._query().where(Usuario.firebase_uid == firebase_uid)
        )
        return result.scalar_one_or_none()

    async def listar(
        self,
        role: UserRole | None = None,
        apenas_ativos: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Usuario]:
        query = self._query()
        if role is not None:
            query = query.where(Usuario.role == role)
        if apenas_ativos:
            query = query.where(Usuario.is_active == True)  # noqa: E712

        result = await self.db.execute(
            query.order_by(Usuario.nome).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def nomes(self, ids: list[UUID]) -> dict[UUID, str]:
        """Nome de cada usuário da lista (ids fora do escopo são ignorados)."""
        if not ids:
            return {}
        query = select(Usuario.id, Usuario.nome).where(Usuario.id.in_(ids))
        if self.empresa_id is not None:
            query = query.where(Usuario.empresa_id == self.empresa_id)
        result = await self.db.execute(query)
        return {usuario_id: nome for usuario_id, nome in result.all()}

    async def count_por_papel(self, role: UserRole | None = None) -> int:
        query = self._query()
        if role is not None:
            query = query.where(Usuario.role == role)
        result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        return result.scalar_one()

    async def get_admins(self, empresa_id: UUID) -> list[Usuario]:
        """Lista administradores ativos de uma empresa."""
        result = await self.db.execute(
            select(Usuario).where(
                Usuario.empresa_id == empresa_id,
                Usuario.role == UserRole.ADMIN,
                Usuario.is_active == True,  # noqa: E712
            )
        )
        return list(result.scalars().all())

    async def registrar_login(self, usuario_id: UUID) -> None:
        await self.db.execute(
            update(Usuario)
            .where(Usuario.id == usuario_id)
            .values(ultimo_login=utcnow())
        )
        await self.db.commit()

    async def upsert_papel(
        self,
        firebase_uid: str,
        email: str,
        nome: str,
        role: UserRole,
        empresa_id: UUID | None,
    ) -> Usuario:
        """
        Cria ou atualiza o perfil de uma identidade em um único comando.

        INSERT ... ON CONFLICT (firebase_uid) DO UPDATE: dois pedidos
        concorrentes para o mesmo uid nunca criam linhas duplicadas.
        """
        dialeto = self.db.get_bind().dialect.name
        insert = pg_insert if dialeto == "postgresql" else sqlite_insert

        stmt = insert(Usuario).values(
            firebase_uid=firebase_uid,
            email=email,
            nome=nome,
            role=role,
            empresa_id=empresa_id,
            is_active=True,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Usuario.firebase_uid],
            set_={
                "role": stmt.excluded.role,
                "empresa_id": stmt.excluded.empresa_id,
                "updated_at": utcnow(),
            },
        ).returning(Usuario)

        result = await self.db.execute(
            stmt,
            execution_options={"populate_existing": True},
        )
        usuario = result.scalar_one()
        await self.db.commit()
        return usuario
