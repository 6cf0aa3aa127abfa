"""
Modelos de contestação de laudo.

Depois de finalizada, a empresa gera um link público (token com
validade) para que o cliente conteste o laudo.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import MultiTenantBase, utcnow


class LinkContestacao(MultiTenantBase):
    """Link público e de uso único para contestação."""

    __tablename__ = "links_contestacao"

    vistoria_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vistorias.id"),
        nullable=False,
        index=True,
    )
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    expira_em: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    utilizado: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def is_valido(self) -> bool:
        expira = self.expira_em
        # SQLite devolve datetimes sem timezone
        if expira.tzinfo is None:
            expira = expira.replace(tzinfo=utcnow().tzinfo)
        return not self.utilizado and expira > utcnow()

    def __repr__(self) -> str:
        return f"<LinkContestacao(vistoria_id={self.vistoria_id}, utilizado={self.utilizado})>"


class Contestacao(MultiTenantBase):
    """Contestação registrada pelo cliente."""

    __tablename__ = "contestacoes"

    vistoria_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vistorias.id"),
        nullable=False,
        index=True,
    )
    link_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("links_contestacao.id"),
        nullable=False,
    )

    nome_contestante: Mapped[str] = mapped_column(String(255), nullable=False)
    email_contestante: Mapped[str] = mapped_column(String(255), nullable=False)
    motivo: Mapped[str] = mapped_column(Text, nullable=False)
    resolvida: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Contestacao(id={self.id}, vistoria_id={self.vistoria_id})>"
