"""
Repositories de Vistoria, Ambiente e Foto.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.db.base import utcnow
from grifo.models.vistoria import Ambiente, Foto, StatusVistoria, Vistoria
from grifo.repositories.base import ModelType, MultiTenantRepository

logger = structlog.get_logger()


class IdempotentRepository(MultiTenantRepository[ModelType]):
    """
    Repository para entidades criadas pelo app móvel.

    A chave de idempotência é única por empresa: repetir a criação com
    a mesma chave devolve a linha já existente.
    """

    async def get_by_idempotency_key(self, idempotency_key: str) -> ModelType | None:
        result = await self.db.execute(
            self._query().where(self.model.idempotency_key == idempotency_key)
        )
        return result.scalar_one_or_none()

    async def create_idempotente(
        self,
        idempotency_key: str | None,
        **kwargs: Any,
    ) -> tuple[ModelType, bool]:
        """
        Cria a entidade ou devolve a existente.

        Returns:
            (entidade, criada)
        """
        if not idempotency_key:
            return await self.create(**kwargs), True

        existente = await self.get_by_idempotency_key(idempotency_key)
        if existente:
            return existente, False

        try:
            return await self.create(idempotency_key=idempotency_key, **kwargs), True
        except IntegrityError:
            # Corrida entre dois envios com a mesma chave
            await self.db.rollback()
            existente = await self.get_by_idempotency_key(idempotency_key)
            if existente is None:
                raise
            logger.info(
                "Criação concorrente resolvida pela chave de idempotência",
                model=self.model.__name__,
                idempotency_key=idempotency_key,
            )
            return existente, False


class VistoriaRepository(IdempotentRepository[Vistoria]):
    """Repository para operações com Vistoria."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(Vistoria, db, empresa_id)

    async def recarregar(self, vistoria_id: UUID) -> Vistoria | None:
        """Relê a vistoria do banco, descartando o estado em memória."""
        result = await self.db.execute(
            self._query()
            .where(Vistoria.id == vistoria_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def listar(
        self,
        status: StatusVistoria | None = None,
        imovel_id: UUID | None = None,
        vistoriador_id: UUID | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Vistoria], int]:
        """Lista vistorias com filtros. Retorna (itens, total)."""
        query = self._query()
        if status is not None:
            query = query.where(Vistoria.status == status)
        if imovel_id is not None:
            query = query.where(Vistoria.imovel_id == imovel_id)
        if vistoriador_id is not None:
            query = query.where(Vistoria.vistoriador_id == vistoriador_id)

        total_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        result = await self.db.execute(
            query.order_by(Vistoria.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total_result.scalar_one()

    async def relatorio(
        self,
        data_inicio: datetime | None = None,
        data_fim: datetime | None = None,
        status: StatusVistoria | None = None,
        vistoriador_id: UUID | None = None,
        cliente_id: UUID | None = None,
        limit: int = 1000,
    ) -> list[Vistoria]:
        """Vistorias criadas no período, com filtros opcionais."""
        query = self._query()
        if data_inicio is not None:
            query = query.where(Vistoria.created_at >= data_inicio)
        if data_fim is not None:
            query = query.where(Vistoria.created_at <= data_fim)
        if status is not None:
            query = query.where(Vistoria.status == status)
        if vistoriador_id is not None:
            query = query.where(Vistoria.vistoriador_id == vistoriador_id)
        if cliente_id is not None:
            query = query.where(Vistoria.cliente_id == cliente_id)

        result = await self.db.execute(
            query.order_by(Vistoria.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def finalizar(self, vistoria_id: UUID, pdf_url: str) -> bool:
        """
        Finaliza a vistoria em um único UPDATE condicional.

        Só altera a linha se o status atual for em_andamento; status,
        pdf_url e data_finalizacao mudam juntos.

        Returns:
            True se a linha foi alterada
        """
        agora = utcnow()
        stmt = (
            update(Vistoria)
            .where(
                Vistoria.id == vistoria_id,
                Vistoria.status == StatusVistoria.EM_ANDAMENTO,
            )
            .values(
                status=StatusVistoria.FINALIZADA,
                pdf_url=pdf_url,
                data_finalizacao=agora,
                updated_at=agora,
            )
            .execution_options(synchronize_session=False)
        )
        if self.empresa_id is not None:
            stmt = stmt.where(Vistoria.empresa_id == self.empresa_id)

        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount == 1

    async def transicionar_status(
        self,
        vistoria_id: UUID,
        de: StatusVistoria,
        para: StatusVistoria,
        commit: bool = True,
        **valores: Any,
    ) -> bool:
        """
        Troca o status apenas se o atual ainda for ``de``.

        Com ``commit=False`` a troca fica na transação do chamador.
        """
        stmt = (
            update(Vistoria)
            .where(Vistoria.id == vistoria_id, Vistoria.status == de)
            .values(status=para, updated_at=utcnow(), **valores)
            .execution_options(synchronize_session=False)
        )
        if self.empresa_id is not None:
            stmt = stmt.where(Vistoria.empresa_id == self.empresa_id)

        result = await self.db.execute(stmt)
        if commit:
            await self.db.commit()
        return result.rowcount == 1

    async def set_drive_url(self, vistoria_id: UUID, drive_url: str) -> None:
        await self.db.execute(
            update(Vistoria)
            .where(Vistoria.id == vistoria_id)
            .values(drive_url=drive_url, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

    async def count_por_status(self) -> dict[StatusVistoria, int]:
        query = self._query().subquery()
        result = await self.db.execute(
            select(query.c.status, func.count()).group_by(query.c.status)
        )
        return {StatusVistoria(row[0]): row[1] for row in result.all()}

    async def count_desde(self, inicio: datetime) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(
                self._query().where(Vistoria.created_at >= inicio).subquery()
            )
        )
        return result.scalar_one()


class AmbienteRepository(IdempotentRepository[Ambiente]):
    """Repository para operações com Ambiente."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(Ambiente, db, empresa_id)

    async def listar_por_vistoria(self, vistoria_id: UUID) -> list[Ambiente]:
        result = await self.db.execute(
            self._query()
            .where(Ambiente.vistoria_id == vistoria_id)
            .order_by(Ambiente.ordem, Ambiente.created_at)
        )
        return list(result.scalars().all())


class FotoRepository(IdempotentRepository[Foto]):
    """Repository para operações com Foto."""

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        super().__init__(Foto, db, empresa_id)

    async def listar_por_vistoria(
        self,
        vistoria_id: UUID,
        ambiente_id: UUID | None = None,
    ) -> list[Foto]:
        query = self._query().where(Foto.vistoria_id == vistoria_id)
        if ambiente_id is not None:
            query = query.where(Foto.ambiente_id == ambiente_id)
        result = await self.db.execute(query.order_by(Foto.ordem, Foto.created_at))
        return list(result.scalars().all())
