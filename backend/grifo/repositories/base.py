"""
Repository base com operações CRUD genéricas.
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.db.base import Base, MultiTenantBase

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository base com operações CRUD.

    Uso:
        class EmpresaRepository(BaseRepository[Empresa]):
            def __init__(self, db: AsyncSession):
                super().__init__(Empresa, db)
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    def _query(self) -> Select:
        return select(self.model)

    async def get_by_id(self, id: UUID) -> ModelType | None:
        result = await self.db.execute(self._query().where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ModelType]:
        """Lista entidades com paginação (mais recentes primeiro)."""
        result = await self.db.execute(
            self._query()
            .order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(self._query().subquery())
        )
        return result.scalar_one()

    async def create(self, **kwargs: Any) -> ModelType:
        """Cria nova entidade."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.commit()
        await self.db.refresh(instance)
        return instance

    async def update(
        self,
        id: UUID,
        **kwargs: Any,
    ) -> ModelType | None:
        """Atualiza entidade existente (ignora valores None)."""
        instance = await self.get_by_id(id)
        if not instance:
            return None

        for key, value in kwargs.items():
            if value is not None:
                setattr(instance, key, value)

        await self.db.commit()
        await self.db.refresh(instance)
        return instance


class MultiTenantRepository(BaseRepository[ModelType]):
    """
    Repository com suporte a multi-tenancy.

    Todas as queries são filtradas pelo escopo de empresa. Escopo
    ``None`` só é usado por superadmin sem empresa alvo e libera a
    leitura entre empresas. Linhas de outra empresa são indistinguíveis
    de linhas inexistentes.
    """

    def __init__(
        self,
        model: type[ModelType],
        db: AsyncSession,
        empresa_id: UUID | None,
    ):
        super().__init__(model, db)
        self.empresa_id = empresa_id

    def _query(self) -> Select:
        query = select(self.model)
        if self.empresa_id is not None and issubclass(self.model, MultiTenantBase):
            query = query.where(self.model.empresa_id == self.empresa_id)
        return query

    async def create(self, **kwargs: Any) -> ModelType:
        """Cria entidade vinculada ao tenant."""
        if issubclass(self.model, MultiTenantBase) and self.empresa_id is not None:
            kwargs["empresa_id"] = self.empresa_id
        return await super().create(**kwargs)
