"""
Repositories de contestação de laudo.
"""

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.db.base import utcnow
from grifo.models.contestacao import Contestacao, LinkContestacao
from grifo.repositories.base import MultiTenantRepository


class LinkContestacaoRepository(MultiTenantRepository[LinkContestacao]):
    """
    Repository de links de contestação.

    A busca por token é usada pela área pública, sem escopo de empresa.
    """

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(LinkContestacao, db, empresa_id)

    async def get_by_token(self, token: str) -> LinkContestacao | None:
        result = await self.db.execute(
            self._query().where(LinkContestacao.token == token)
        )
        return result.scalar_one_or_none()

    async def marcar_utilizado(self, link_id: UUID) -> bool:
        """Consome o link. Falso se já tinha sido utilizado."""
        result = await self.db.execute(
            update(LinkContestacao)
            .where(
                LinkContestacao.id == link_id,
                LinkContestacao.utilizado == False,  # noqa: E712
            )
            .values(utilizado=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class ContestacaoRepository(MultiTenantRepository[Contestacao]):
    """Repository para operações com Contestação."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(Contestacao, db, empresa_id)

    async def listar_por_vistoria(self, vistoria_id: UUID) -> list[Contestacao]:
        result = await self.db.execute(
            self._query()
            .where(Contestacao.vistoria_id == vistoria_id)
            .order_by(Contestacao.created_at.desc())
        )
        return list(result.scalars().all())

    async def count_abertas(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(
                self._query()
                .where(Contestacao.resolvida == False)  # noqa: E712
                .subquery()
            )
        )
        return result.scalar_one()
