"""
Base class para todos os modelos SQLAlchemy.

Define campos comuns e configurações padrão.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Type

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


def PgEnum(enum_class: Type) -> SQLEnum:
    """
    Cria um SQLAlchemy Enum que usa os valores (values) em vez dos nomes (names).

    PostgreSQL guarda os valores em minúsculo ("em_andamento"), enquanto
    os membros do Enum Python são maiúsculos (EM_ANDAMENTO).
    """
    return SQLEnum(enum_class, values_callable=lambda x: [e.value for e in x])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Classe base para todos os modelos.

    Inclui campos padrão: id, created_at, updated_at
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    @declared_attr.directive
    @classmethod
    def __tablename__(cls) -> str:
        """Gera nome da tabela automaticamente a partir do nome da classe."""
        name = cls.__name__
        return "".join(
            ["_" + c.lower() if c.isupper() else c for c in name]
        ).lstrip("_")

    def to_dict(self) -> dict[str, Any]:
        """Converte modelo para dicionário."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }


class MultiTenantBase(Base):
    """
    Base para modelos com multi-tenancy.

    Todos os modelos que herdam desta classe são isolados por empresa.
    """

    __abstract__ = True

    empresa_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("empresas.id"),
        nullable=False,
        index=True,
    )
