"""
Base dos services que operam dentro do escopo de uma empresa.
"""

from contextlib import suppress
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso, garantir_empresa_ativa
from grifo.core.exceptions import ValidationError
from grifo.db.base import Base


class TenantService:
    """
    Service construído a partir do contexto de acesso da requisição.

    Os repositories recebem ``ctx.empresa_id`` como escopo; para
    superadmin sem empresa alvo o escopo é None.
    """

    def __init__(self, db: AsyncSession, ctx: ContextoAcesso):
        self._db = db
        self._ctx = ctx

    @property
    def _empresa_id(self) -> UUID | None:
        return self._ctx.empresa_id

    def _exigir_empresa(self) -> UUID:
        """Empresa alvo obrigatória (criação de registros)."""
        if self._ctx.empresa_id is None:
            raise ValidationError(
                "Informe empresa_id para operar sobre uma empresa",
                field="empresa_id",
            )
        return self._ctx.empresa_id

    async def _garantir_empresa_do_recurso(self, empresa_id: UUID) -> None:
        """
        Acesso implícito via recurso: com escopo definido o gate já
        conferiu a empresa; sem escopo (superadmin) confere aqui.
        """
        if self._ctx.empresa_id is None:
            await garantir_empresa_ativa(self._db, empresa_id)


async def descartar_transacao(db: AsyncSession, *preservar: Base) -> None:
    """
    Desfaz uma etapa best-effort que falhou.

    O rollback expira todas as instâncias da sessão; as instâncias em
    ``preservar`` são recarregadas para continuarem utilizáveis.
    """
    with suppress(SQLAlchemyError):
        await db.rollback()
        for instancia in preservar:
            await db.refresh(instancia)
