"""
Schemas de Vistoria, Ambiente e Foto.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from grifo.models.vistoria import StatusVistoria, TipoVistoria
from grifo.schemas.base import BaseSchema, IDMixin, TimestampMixin


class VistoriaBase(BaseSchema):
    imovel_id: UUID
    tipo: TipoVistoria
    data_agendada: datetime | None = None
    cliente_id: UUID | None = None
    observacoes: str | None = None


class VistoriaCreate(VistoriaBase):
    """
    Schema para criação de vistoria.

    Sem vistoriador_id o próprio usuário autenticado é o vistoriador.
    """

    vistoriador_id: UUID | None = None
    status: StatusVistoria = StatusVistoria.RASCUNHO
    idempotency_key: str | None = Field(None, max_length=128)


class VistoriaUpdate(BaseSchema):
    """Schema para atualização parcial de vistoria."""

    data_agendada: datetime | None = None
    vistoriador_id: UUID | None = None
    cliente_id: UUID | None = None
    observacoes: str | None = None


class VistoriaStatusUpdate(BaseSchema):
    """Transição manual de status (rascunho <-> em andamento)."""

    status: StatusVistoria


class FinalizarVistoriaRequest(BaseSchema):
    pdf_url: str = Field(..., min_length=1, max_length=1000)


class VistoriaResponse(VistoriaBase, IDMixin, TimestampMixin):
    empresa_id: UUID
    vistoriador_id: UUID
    status: StatusVistoria
    data_finalizacao: datetime | None = None
    pdf_url: str | None = None
    drive_url: str | None = None
    token_contestacao: str | None = None
    idempotency_key: str | None = None


class FinalizacaoResponse(BaseSchema):
    """Resultado da finalização; ja_finalizada indica repetição idempotente."""

    vistoria: VistoriaResponse
    ja_finalizada: bool


# === Ambientes ===

class AmbienteCreate(BaseSchema):
    nome: str = Field(..., min_length=1, max_length=255)
    ordem: int = Field(0, ge=0)
    observacoes: str | None = None
    idempotency_key: str | None = Field(None, max_length=128)


class AmbienteResponse(IDMixin, TimestampMixin, BaseSchema):
    empresa_id: UUID
    vistoria_id: UUID
    nome: str
    ordem: int
    observacoes: str | None = None
    idempotency_key: str | None = None


# === Fotos ===

class FotoResponse(IDMixin, TimestampMixin, BaseSchema):
    empresa_id: UUID
    vistoria_id: UUID
    ambiente_id: UUID | None = None
    storage_path: str
    url: str | None = None
    legenda: str | None = None
    ordem: int
    idempotency_key: str | None = None


class LaudoUploadResponse(BaseSchema):
    """Resultado do upload do laudo PDF."""

    storage_path: str
    pdf_url: str
