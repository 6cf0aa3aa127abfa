"""
Repository de registros de auditoria.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from grifo.models.auditoria import RegistroAuditoria
from grifo.repositories.base import BaseRepository


class AuditoriaRepository(BaseRepository[RegistroAuditoria]):
    def __init__(self, db: AsyncSession):
        super().__init__(RegistroAuditoria, db)
