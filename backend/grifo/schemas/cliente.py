"""
Schemas de Cliente e Solicitação de Vistoria.
"""

from uuid import UUID

from pydantic import EmailStr, Field

from grifo.models.cliente import StatusSolicitacao, UrgenciaSolicitacao
from grifo.models.vistoria import TipoVistoria
from grifo.schemas.base import BaseSchema, IDMixin, TimestampMixin


class ClienteCreate(BaseSchema):
    """Cadastro público de cliente."""

    empresa_id: UUID
    nome: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    telefone: str | None = None


class ClienteResponse(IDMixin, TimestampMixin, BaseSchema):
    empresa_id: UUID
    nome: str
    email: str
    telefone: str | None = None


class SolicitacaoCreate(BaseSchema):
    """Solicitação de vistoria enviada pela área pública."""

    cliente_id: UUID
    endereco_imovel: str = Field(..., min_length=3)
    tipo: TipoVistoria
    urgencia: UrgenciaSolicitacao = UrgenciaSolicitacao.MEDIA
    observacoes: str | None = None


class SolicitacaoDecisao(BaseSchema):
    """Decisão do administrador sobre a solicitação."""

    status: StatusSolicitacao
    comentario: str | None = None


class SolicitacaoResponse(IDMixin, TimestampMixin, BaseSchema):
    empresa_id: UUID
    cliente_id: UUID
    endereco_imovel: str
    tipo: TipoVistoria
    urgencia: UrgenciaSolicitacao
    status: StatusSolicitacao
    observacoes: str | None = None
    comentario_decisao: str | None = None
