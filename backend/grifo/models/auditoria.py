"""
Modelo de registro de auditoria.
"""

import uuid
from typing import Any

from sqlalchemy import JSON, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import Base


class RegistroAuditoria(Base):
    """Ação administrativa registrada para auditoria."""

    __tablename__ = "registros_auditoria"

    # Nulo para ações de superadmin fora de uma empresa
    empresa_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("empresas.id"),
        index=True,
    )
    usuario_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("usuarios.id"),
        index=True,
    )

    acao: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    recurso_tipo: Mapped[str] = mapped_column(String(50), nullable=False)
    recurso_id: Mapped[str | None] = mapped_column(String(64))
    detalhes: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    def __repr__(self) -> str:
        return f"<RegistroAuditoria(acao='{self.acao}', recurso={self.recurso_tipo})>"
