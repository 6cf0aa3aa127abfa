"""
Schemas de Notificação.

Os metadados de cada notificação são uma união discriminada pelo
campo ``tipo``: cada evento tem seu próprio conjunto fixo de campos.
"""

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import Field, TypeAdapter

from grifo.models.notificacao import TipoDestinatario, TipoNotificacao
from grifo.models.vistoria import StatusVistoria
from grifo.schemas.base import BaseSchema, IDMixin, TimestampMixin


class SolicitacaoCriadaMeta(BaseSchema):
    tipo: Literal["inspection_request_created"] = "inspection_request_created"
    solicitacao_id: UUID
    cliente_id: UUID
    cliente_nome: str


class SolicitacaoDecididaMeta(BaseSchema):
    tipo: Literal[
        "inspection_request_approved",
        "inspection_request_rejected",
        "inspection_request_changes_requested",
    ]
    solicitacao_id: UUID
    comentario: str | None = None


class VistoriaAgendadaMeta(BaseSchema):
    tipo: Literal["inspection_scheduled"] = "inspection_scheduled"
    vistoria_id: UUID
    data_agendada: datetime


class StatusAlteradoMeta(BaseSchema):
    tipo: Literal["inspection_status_changed"] = "inspection_status_changed"
    vistoria_id: UUID
    status_anterior: StatusVistoria
    status_novo: StatusVistoria


class LaudoDisponivelMeta(BaseSchema):
    tipo: Literal["report_available"] = "report_available"
    vistoria_id: UUID
    pdf_url: str


MetadadosNotificacao = Annotated[
    Union[
        SolicitacaoCriadaMeta,
        SolicitacaoDecididaMeta,
        VistoriaAgendadaMeta,
        StatusAlteradoMeta,
        LaudoDisponivelMeta,
    ],
    Field(discriminator="tipo"),
]

metadados_adapter: TypeAdapter[MetadadosNotificacao] = TypeAdapter(MetadadosNotificacao)


class NotificacaoResponse(IDMixin, TimestampMixin, BaseSchema):
    empresa_id: UUID
    recipient_type: TipoDestinatario
    recipient_id: UUID
    tipo: TipoNotificacao
    titulo: str
    mensagem: str
    lida: bool
    metadados: MetadadosNotificacao


class NotificacaoContagem(BaseSchema):
    nao_lidas: int
