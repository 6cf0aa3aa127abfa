"""
Repository da Empresa.
"""

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.db.base import utcnow
from grifo.models.empresa import Empresa
from grifo.models.imovel import Imovel
from grifo.models.usuario import Usuario
from grifo.models.vistoria import Foto, Vistoria
from grifo.repositories.base import BaseRepository


class EmpresaRepository(BaseRepository[Empresa]):
    """Repository para operações com Empresa."""

    def __init__(self, db: AsyncSession):
        super().__init__(Empresa, db)

    async def get_by_cnpj(self, cnpj: str) -> Empresa | None:
        result = await self.db.execute(
            select(Empresa).where(Empresa.cnpj == cnpj)
        )
        return result.scalar_one_or_none()

    async def listar(
        self,
        ativa: bool | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Empresa]:
        query = select(Empresa)
        if ativa is not None:
            query = query.where(Empresa.ativa == ativa)

        result = await self.db.execute(
            query.order_by(Empresa.nome).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def count_filtrado(self, ativa: bool | None = None) -> int:
        query = select(func.count()).select_from(Empresa)
        if ativa is not None:
            query = query.where(Empresa.ativa == ativa)
        result = await self.db.execute(query)
        return result.scalar_one()

    async def set_ativa(self, empresa_id: UUID, ativa: bool) -> Empresa | None:
        """Ativa ou desativa a empresa (nunca remove)."""
        await self.db.execute(
            update(Empresa)
            .where(Empresa.id == empresa_id)
            .values(ativa=ativa, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        result = await self.db.execute(
            select(Empresa)
            .where(Empresa.id == empresa_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def contagens_uso(self, empresa_id: UUID) -> dict[str, int]:
        """Conta usuários, imóveis, vistorias e fotos da empresa."""
        contagens: dict[str, int] = {}
        for chave, model in (
            ("total_usuarios", Usuario),
            ("total_imoveis", Imovel),
            ("total_vistorias", Vistoria),
            ("total_fotos", Foto),
        ):
            result = await self.db.execute(
                select(func.count())
                .select_from(model)
                .where(model.empresa_id == empresa_id)
            )
            contagens[chave] = result.scalar_one()
        return contagens
