"""
Modelo do Usuário do sistema.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import Base, PgEnum


class UserRole(str, enum.Enum):
    """Papéis de usuário no sistema."""

    VISTORIADOR = "vistoriador"  # Executa vistorias em campo (app móvel)
    CORRETOR = "corretor"  # Corretor/imobiliária parceira
    ADMIN = "admin"  # Administrador da empresa
    SUPERADMIN = "superadmin"  # Operador da plataforma, sem empresa


class Usuario(Base):
    """Usuário do sistema."""

    __tablename__ = "usuarios"

    # UID no provedor de identidade (Firebase)
    firebase_uid: Mapped[str | None] = mapped_column(
        String(128),
        unique=True,
        index=True,
        comment="UID do Firebase Authentication",
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str | None] = mapped_column(String(255))
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    telefone: Mapped[str | None] = mapped_column(String(20))

    # Controle de acesso
    role: Mapped[UserRole] = mapped_column(
        PgEnum(UserRole),
        default=UserRole.VISTORIADOR,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    ultimo_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Nulo apenas para superadmin
    empresa_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("empresas.id"),
        index=True,
    )

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    def __repr__(self) -> str:
        return f"<Usuario(id={self.id}, email='{self.email}', role={self.role.value})>"
