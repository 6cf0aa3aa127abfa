"""
Modelo da Empresa de vistorias.

Este é o tenant do sistema - todas as entidades operacionais
pertencem a uma empresa específica.
"""

from typing import Any

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import Base


class Empresa(Base):
    """Empresa de vistorias (tenant)."""

    __tablename__ = "empresas"

    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    cnpj: Mapped[str] = mapped_column(String(18), unique=True, nullable=False)

    # Contato
    email: Mapped[str | None] = mapped_column(String(255))
    telefone: Mapped[str | None] = mapped_column(String(20))

    # Empresas nunca são removidas, apenas desativadas
    ativa: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Cota de armazenamento (MB)
    storage_mb: Mapped[int] = mapped_column(Integer, default=1000, nullable=False)

    # Preferências operacionais (seções de ConfiguracoesEmpresa)
    configuracoes: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    def __repr__(self) -> str:
        return f"<Empresa(id={self.id}, nome='{self.nome}', ativa={self.ativa})>"
