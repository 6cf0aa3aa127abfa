"""
Schemas base compartilhados.
"""

from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Schema base com configurações padrão."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class TimestampMixin(BaseModel):
    created_at: datetime
    updated_at: datetime


class IDMixin(BaseModel):
    id: UUID


class APIResponse(BaseModel, Generic[T]):
    """
    Resposta padronizada da API.

    Exemplo de uso:
        return APIResponse(success=True, data=vistoria)
    """

    success: bool
    data: T | None = None
    message: str | None = None


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Resposta de erro padronizada."""

    success: bool = False
    error: ErrorDetail


class PaginatedResponse(BaseModel, Generic[T]):
    """Resposta paginada."""

    success: bool = True
    data: list[T]
    total: int
    page: int
    page_size: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pages(self) -> int:
        if self.page_size == 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size
