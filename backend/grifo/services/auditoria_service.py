"""
Service de auditoria.

Registros de auditoria são gravados depois da transação principal e
nunca fazem a operação principal falhar.
"""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso
from grifo.db.base import Base
from grifo.models.auditoria import RegistroAuditoria
from grifo.repositories.auditoria_repository import AuditoriaRepository
from grifo.services.base import descartar_transacao

logger = structlog.get_logger()


class AuditoriaService:
    def __init__(self, db: AsyncSession):
        self._db = db
        self._repo = AuditoriaRepository(db)

    async def registrar(
        self,
        ctx: ContextoAcesso | None,
        acao: str,
        recurso_tipo: str,
        recurso_id: UUID | str | None = None,
        empresa_id: UUID | None = None,
        detalhes: dict[str, Any] | None = None,
        preservar: tuple[Base, ...] = (),
    ) -> RegistroAuditoria | None:
        """Grava um registro de auditoria (best-effort)."""
        try:
            return await self._repo.create(
                empresa_id=empresa_id or (ctx.empresa_id if ctx else None),
                usuario_id=ctx.usuario_id if ctx else None,
                acao=acao,
                recurso_tipo=recurso_tipo,
                recurso_id=str(recurso_id) if recurso_id else None,
                detalhes=detalhes or {},
            )
        except SQLAlchemyError as e:
            await descartar_transacao(self._db, *preservar)
            logger.warning(
                "Falha ao gravar auditoria",
                acao=acao,
                recurso_tipo=recurso_tipo,
                error=str(e),
            )
            return None
