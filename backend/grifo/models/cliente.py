"""
Modelos de Cliente e Solicitação de Vistoria.

Clientes se cadastram pela área pública e solicitam vistorias,
que são aprovadas ou rejeitadas pelos administradores da empresa.
"""

import enum
import uuid

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import MultiTenantBase, PgEnum
from grifo.models.vistoria import TipoVistoria


class UrgenciaSolicitacao(str, enum.Enum):
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"


class StatusSolicitacao(str, enum.Enum):
    """Status da solicitação de vistoria."""

    PENDENTE = "pendente"
    APROVADA = "aprovada"
    REJEITADA = "rejeitada"
    ALTERACOES_SOLICITADAS = "alteracoes_solicitadas"


class Cliente(MultiTenantBase):
    """Cliente de uma empresa de vistorias."""

    __tablename__ = "clientes"
    __table_args__ = (
        UniqueConstraint("empresa_id", "email", name="uq_clientes_empresa_email"),
    )

    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    telefone: Mapped[str | None] = mapped_column(String(20))

    def __repr__(self) -> str:
        return f"<Cliente(id={self.id}, nome='{self.nome}')>"


class SolicitacaoVistoria(MultiTenantBase):
    """Pedido de vistoria feito por um cliente."""

    __tablename__ = "solicitacoes_vistoria"

    cliente_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("clientes.id"),
        nullable=False,
        index=True,
    )

    endereco_imovel: Mapped[str] = mapped_column(Text, nullable=False)
    tipo: Mapped[TipoVistoria] = mapped_column(PgEnum(TipoVistoria), nullable=False)
    urgencia: Mapped[UrgenciaSolicitacao] = mapped_column(
        PgEnum(UrgenciaSolicitacao),
        default=UrgenciaSolicitacao.MEDIA,
        nullable=False,
    )
    status: Mapped[StatusSolicitacao] = mapped_column(
        PgEnum(StatusSolicitacao),
        default=StatusSolicitacao.PENDENTE,
        nullable=False,
        index=True,
    )

    observacoes: Mapped[str | None] = mapped_column(Text)
    comentario_decisao: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<SolicitacaoVistoria(id={self.id}, status={self.status.value})>"
