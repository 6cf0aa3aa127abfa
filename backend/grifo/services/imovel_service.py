"""
Service de Imóveis.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso
from grifo.core.exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from grifo.models.imovel import Imovel, TipoImovel
from grifo.repositories.imovel_repository import ImovelRepository
from grifo.schemas.imovel import ImovelCreate, ImovelUpdate
from grifo.services.base import TenantService


class ImovelService(TenantService):
    def __init__(self, db: AsyncSession, ctx: ContextoAcesso):
        super().__init__(db, ctx)
        self._repo = ImovelRepository(db, ctx.empresa_id)

    async def criar(self, dados: ImovelCreate) -> Imovel:
        self._exigir_empresa()
        if await self._repo.get_by_codigo(dados.codigo):
            raise ResourceAlreadyExistsError("Imovel", "codigo", dados.codigo)
        return await self._repo.create(**dados.model_dump())

    async def obter(self, imovel_id: UUID) -> Imovel:
        imovel = await self._repo.get_by_id(imovel_id)
        if imovel is None:
            raise ResourceNotFoundError("Imóvel", imovel_id)
        await self._garantir_empresa_do_recurso(imovel.empresa_id)
        return imovel

    async def listar(
        self,
        query: str | None = None,
        tipo: TipoImovel | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Imovel], int]:
        itens = await self._repo.search(query, tipo, skip, limit)
        return itens, await self._repo.count()

    async def atualizar(self, imovel_id: UUID, dados: ImovelUpdate) -> Imovel:
        await self.obter(imovel_id)
        return await self._repo.update(imovel_id, **dados.model_dump(exclude_unset=True))
