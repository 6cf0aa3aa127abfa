"""
Schemas de contestação de laudo.
"""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from grifo.models.vistoria import StatusVistoria, TipoVistoria
from grifo.schemas.base import BaseSchema, IDMixin, TimestampMixin


class LinkContestacaoResponse(IDMixin, BaseSchema):
    vistoria_id: UUID
    token: str
    expira_em: datetime
    utilizado: bool


class ContestacaoPublica(BaseSchema):
    """Dados da vistoria exibidos na página pública de contestação."""

    vistoria_id: UUID
    tipo: TipoVistoria
    status: StatusVistoria
    data_finalizacao: datetime | None = None
    pdf_url: str | None = None
    expira_em: datetime


class ContestacaoCreate(BaseSchema):
    nome_contestante: str = Field(..., min_length=2, max_length=255)
    email_contestante: EmailStr
    motivo: str = Field(..., min_length=10)


class ContestacaoResponse(IDMixin, TimestampMixin, BaseSchema):
    empresa_id: UUID
    vistoria_id: UUID
    nome_contestante: str
    email_contestante: str
    motivo: str
    resolvida: bool
