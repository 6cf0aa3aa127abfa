"""
Schemas do Imóvel.
"""

from uuid import UUID

from pydantic import Field

from grifo.models.imovel import TipoImovel
from grifo.schemas.base import BaseSchema, IDMixin, TimestampMixin


class ImovelBase(BaseSchema):
    codigo: str = Field(..., min_length=1, max_length=50)
    tipo: TipoImovel
    endereco: str = Field(..., min_length=3)
    cidade: str | None = None
    estado: str | None = Field(None, max_length=2)
    cep: str | None = None
    proprietario_nome: str | None = None


class ImovelCreate(ImovelBase):
    pass


class ImovelUpdate(BaseSchema):
    """Schema para atualização parcial de imóvel."""

    tipo: TipoImovel | None = None
    endereco: str | None = Field(None, min_length=3)
    cidade: str | None = None
    estado: str | None = Field(None, max_length=2)
    cep: str | None = None
    proprietario_nome: str | None = None


class ImovelResponse(ImovelBase, IDMixin, TimestampMixin):
    empresa_id: UUID
