"""
Modelo de Imóvel.
"""

import enum

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import MultiTenantBase, PgEnum


class TipoImovel(str, enum.Enum):
    """Tipos de imóvel."""

    APARTAMENTO = "apartamento"
    CASA = "casa"
    COMERCIAL = "comercial"


class Imovel(MultiTenantBase):
    """Imóvel vistoriado por uma empresa."""

    __tablename__ = "imoveis"
    __table_args__ = (
        UniqueConstraint("empresa_id", "codigo", name="uq_imoveis_empresa_codigo"),
    )

    codigo: Mapped[str] = mapped_column(String(50), nullable=False)
    tipo: Mapped[TipoImovel] = mapped_column(PgEnum(TipoImovel), nullable=False)

    # Endereço
    endereco: Mapped[str] = mapped_column(Text, nullable=False)
    cidade: Mapped[str | None] = mapped_column(String(100))
    estado: Mapped[str | None] = mapped_column(String(2))
    cep: Mapped[str | None] = mapped_column(String(10))

    proprietario_nome: Mapped[str | None] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<Imovel(id={self.id}, codigo='{self.codigo}')>"
