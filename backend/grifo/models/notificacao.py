"""
Modelo de Notificação.

Notificações só são criadas como efeito colateral de transições de
estado (solicitações, agendamentos, laudos). A única alteração
permitida depois disso é marcar como lida.
"""

import enum
import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import MultiTenantBase, PgEnum


class TipoNotificacao(str, enum.Enum):
    """Tipos de notificação."""

    # Solicitações
    SOLICITACAO_CRIADA = "inspection_request_created"
    SOLICITACAO_APROVADA = "inspection_request_approved"
    SOLICITACAO_REJEITADA = "inspection_request_rejected"
    SOLICITACAO_ALTERACOES = "inspection_request_changes_requested"

    # Vistorias
    VISTORIA_AGENDADA = "inspection_scheduled"
    STATUS_ALTERADO = "inspection_status_changed"
    LAUDO_DISPONIVEL = "report_available"


class TipoDestinatario(str, enum.Enum):
    ADMIN = "admin"
    CLIENTE = "cliente"


class Notificacao(MultiTenantBase):
    """Notificação endereçada a um administrador ou cliente."""

    __tablename__ = "notificacoes"

    recipient_type: Mapped[TipoDestinatario] = mapped_column(
        PgEnum(TipoDestinatario),
        nullable=False,
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    tipo: Mapped[TipoNotificacao] = mapped_column(
        PgEnum(TipoNotificacao),
        nullable=False,
        index=True,
    )
    titulo: Mapped[str] = mapped_column(String(255), nullable=False)
    mensagem: Mapped[str] = mapped_column(Text, nullable=False)
    lida: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # Validado pelos schemas de metadados (união discriminada por tipo)
    metadados: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    def __repr__(self) -> str:
        return f"<Notificacao(id={self.id}, tipo={self.tipo.value}, lida={self.lida})>"
