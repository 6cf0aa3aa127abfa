"""
Repositories de Cliente e Solicitação de Vistoria.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.models.cliente import Cliente, SolicitacaoVistoria, StatusSolicitacao
from grifo.repositories.base import MultiTenantRepository


class ClienteRepository(MultiTenantRepository[Cliente]):
    """Repository para operações com Cliente."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(Cliente, db, empresa_id)

    async def get_by_email(self, email: str) -> Cliente | None:
        result = await self.db.execute(
            self._query().where(func.lower(Cliente.email) == email.lower())
        )
        return result.scalar_one_or_none()


class SolicitacaoRepository(MultiTenantRepository[SolicitacaoVistoria]):
    """Repository para operações com Solicitação de Vistoria."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(SolicitacaoVistoria, db, empresa_id)

    async def listar(
        self,
        status: StatusSolicitacao | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[SolicitacaoVistoria], int]:
        query = self._query()
        if status is not None:
            query = query.where(SolicitacaoVistoria.status == status)

        total_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        result = await self.db.execute(
            query.order_by(SolicitacaoVistoria.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total_result.scalar_one()

    async def relatorio(
        self,
        data_inicio: datetime | None = None,
        data_fim: datetime | None = None,
        status: StatusSolicitacao | None = None,
        cliente_id: UUID | None = None,
        limit: int = 1000,
    ) -> list[SolicitacaoVistoria]:
        """Solicitações recebidas no período, com filtros opcionais."""
        query = self._query()
        if data_inicio is not None:
            query = query.where(SolicitacaoVistoria.created_at >= data_inicio)
        if data_fim is not None:
            query = query.where(SolicitacaoVistoria.created_at <= data_fim)
        if status is not None:
            query = query.where(SolicitacaoVistoria.status == status)
        if cliente_id is not None:
            query = query.where(SolicitacaoVistoria.cliente_id == cliente_id)

        result = await self.db.execute(
            query.order_by(SolicitacaoVistoria.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def count_pendentes(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(
                self._query()
                .where(SolicitacaoVistoria.status == StatusSolicitacao.PENDENTE)
                .subquery()
            )
        )
        return result.scalar_one()
