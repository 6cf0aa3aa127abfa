"""
Repository do Imóvel.
"""

from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.models.imovel import Imovel, TipoImovel
from grifo.repositories.base import MultiTenantRepository


class ImovelRepository(MultiTenantRepository[Imovel]):
    """Repository para operações com Imóvel."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(Imovel, db, empresa_id)

    async def get_by_codigo(self, codigo: str) -> Imovel | None:
        result = await self.db.execute(
            self._query().where(Imovel.codigo == codigo)
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        query: str | None = None,
        tipo: TipoImovel | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> list[Imovel]:
        """Busca imóveis por código, endereço ou proprietário."""
        stmt = self._query()
        if query:
            search_term = f"%{query}%"
            stmt = stmt.where(
                or_(
                    Imovel.codigo.ilike(search_term),
                    Imovel.endereco.ilike(search_term),
                    Imovel.proprietario_nome.ilike(search_term),
                )
            )
        if tipo is not None:
            stmt = stmt.where(Imovel.tipo == tipo)

        result = await self.db.execute(
            stmt.order_by(Imovel.codigo).offset(skip).limit(limit)
        )
        return list(result.scalars().all())
