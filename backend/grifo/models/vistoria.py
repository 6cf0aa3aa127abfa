"""
Modelos de Vistoria, Ambiente e Foto.

A vistoria é o núcleo operacional do sistema: pertence a uma empresa
e a um imóvel, tem exatamente um vistoriador e progride de rascunho
até finalizada (ou contestada).
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import MultiTenantBase, PgEnum


class TipoVistoria(str, enum.Enum):
    """Tipos de vistoria."""

    ENTRADA = "entrada"
    SAIDA = "saida"
    PERIODICA = "periodica"


class StatusVistoria(str, enum.Enum):
    """Status da vistoria."""

    RASCUNHO = "rascunho"
    EM_ANDAMENTO = "em_andamento"
    FINALIZADA = "finalizada"
    CONTESTADA = "contestada"


class Vistoria(MultiTenantBase):
    """
    Vistoria de um imóvel.

    O laudo (pdf_url) só existe depois de finalizada e o
    token_contestacao só depois de contestada.
    """

    __tablename__ = "vistorias"
    __table_args__ = (
        UniqueConstraint(
            "empresa_id", "idempotency_key", name="uq_vistorias_empresa_idempotency"
        ),
    )

    imovel_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("imoveis.id"),
        nullable=False,
        index=True,
    )
    vistoriador_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("usuarios.id"),
        nullable=False,
        index=True,
    )
    cliente_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("clientes.id"),
        index=True,
    )

    tipo: Mapped[TipoVistoria] = mapped_column(PgEnum(TipoVistoria), nullable=False)
    status: Mapped[StatusVistoria] = mapped_column(
        PgEnum(StatusVistoria),
        default=StatusVistoria.RASCUNHO,
        nullable=False,
        index=True,
    )

    data_agendada: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    data_finalizacao: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Laudo
    pdf_url: Mapped[str | None] = mapped_column(String(1000))
    drive_url: Mapped[str | None] = mapped_column(
        String(1000),
        comment="Cópia do laudo no Google Drive",
    )

    token_contestacao: Mapped[str | None] = mapped_column(String(128), index=True)

    # Chave gerada pelo app móvel para evitar duplicidade em reenvios
    idempotency_key: Mapped[str | None] = mapped_column(String(128))

    observacoes: Mapped[str | None] = mapped_column(Text)

    @property
    def is_finalizada(self) -> bool:
        return self.status == StatusVistoria.FINALIZADA

    def __repr__(self) -> str:
        return f"<Vistoria(id={self.id}, status={self.status.value})>"


class Ambiente(MultiTenantBase):
    """Ambiente (cômodo) vistoriado."""

    __tablename__ = "ambientes"
    __table_args__ = (
        UniqueConstraint(
            "empresa_id", "idempotency_key", name="uq_ambientes_empresa_idempotency"
        ),
    )

    vistoria_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vistorias.id"),
        nullable=False,
        index=True,
    )
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    ordem: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    observacoes: Mapped[str | None] = mapped_column(Text)
    idempotency_key: Mapped[str | None] = mapped_column(String(128))

    def __repr__(self) -> str:
        return f"<Ambiente(id={self.id}, nome='{self.nome}')>"


class Foto(MultiTenantBase):
    """Registro de uma foto enviada ao storage."""

    __tablename__ = "fotos"
    __table_args__ = (
        UniqueConstraint(
            "empresa_id", "idempotency_key", name="uq_fotos_empresa_idempotency"
        ),
    )

    vistoria_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vistorias.id"),
        nullable=False,
        index=True,
    )
    ambiente_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("ambientes.id"),
        index=True,
    )

    storage_path: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str | None] = mapped_column(String(1000))
    legenda: Mapped[str | None] = mapped_column(String(500))
    ordem: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    idempotency_key: Mapped[str | None] = mapped_column(String(128))

    def __repr__(self) -> str:
        return f"<Foto(id={self.id}, path='{self.storage_path}')>"
