"""
Repository de Notificações.
"""

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.db.base import utcnow
from grifo.models.notificacao import Notificacao, TipoDestinatario
from grifo.repositories.base import MultiTenantRepository


class NotificacaoRepository(MultiTenantRepository[Notificacao]):
    """Repository para operações com Notificação."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(Notificacao, db, empresa_id)

    def _do_destinatario(
        self,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
    ):
        return self._query().where(
            Notificacao.recipient_type == recipient_type,
            Notificacao.recipient_id == recipient_id,
        )

    async def criar_varias(self, notificacoes: list[Notificacao]) -> list[Notificacao]:
        """Grava um lote de notificações em uma transação."""
        self.db.add_all(notificacoes)
        await self.db.commit()
        return notificacoes

    async def listar_do_destinatario(
        self,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
        apenas_nao_lidas: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Notificacao], int]:
        query = self._do_destinatario(recipient_type, recipient_id)
        if apenas_nao_lidas:
            query = query.where(Notificacao.lida == False)  # noqa: E712

        total_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        result = await self.db.execute(
            query.order_by(Notificacao.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total_result.scalar_one()

    async def count_nao_lidas(
        self,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
    ) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(
                self._do_destinatario(recipient_type, recipient_id)
                .where(Notificacao.lida == False)  # noqa: E712
                .subquery()
            )
        )
        return result.scalar_one()

    async def marcar_como_lida(
        self,
        notificacao_id: UUID,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
    ) -> Notificacao | None:
        """Marca uma notificação do destinatário como lida."""
        notificacao = await self.db.scalar(
            self._do_destinatario(recipient_type, recipient_id).where(
                Notificacao.id == notificacao_id
            )
        )
        if notificacao is None:
            return None
        if not notificacao.lida:
            notificacao.lida = True
            await self.db.commit()
            await self.db.refresh(notificacao)
        return notificacao

    async def marcar_todas_como_lidas(
        self,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
    ) -> int:
        stmt = (
            update(Notificacao)
            .where(
                Notificacao.recipient_type == recipient_type,
                Notificacao.recipient_id == recipient_id,
                Notificacao.lida == False,  # noqa: E712
            )
            .values(lida=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if self.empresa_id is not None:
            stmt = stmt.where(Notificacao.empresa_id == self.empresa_id)

        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount
