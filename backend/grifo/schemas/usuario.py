"""
Schemas do Usuário e de autenticação.
"""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from grifo.models.usuario import UserRole
from grifo.schemas.base import BaseSchema, IDMixin, TimestampMixin


class UsuarioBase(BaseSchema):
    email: EmailStr
    nome: str = Field(..., min_length=2, max_length=255)
    telefone: str | None = None
    role: UserRole = UserRole.VISTORIADOR


class UsuarioCreate(UsuarioBase):
    """Schema para criação de usuário por um administrador."""

    password: str | None = Field(None, min_length=8, description="Senha para login local")
    firebase_uid: str | None = None


class UsuarioUpdate(BaseSchema):
    """
    Schema para atualização parcial de usuário.

    Papel e empresa só mudam pela atribuição de papel.
    """

    nome: str | None = Field(None, min_length=2, max_length=255)
    telefone: str | None = None
    is_active: bool | None = None


class UsuarioResponse(UsuarioBase, IDMixin, TimestampMixin):
    firebase_uid: str | None = None
    empresa_id: UUID | None = None
    is_active: bool
    ultimo_login: datetime | None = None


class AtribuirPapelRequest(BaseSchema):
    """Atribuição de papel e empresa a uma identidade do Firebase."""

    firebase_uid: str = Field(..., min_length=1)
    role: UserRole
    empresa_id: UUID | None = None
    nome: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def validate_empresa(self) -> "AtribuirPapelRequest":
        if self.role != UserRole.SUPERADMIN and self.empresa_id is None:
            raise ValueError("empresa_id é obrigatório para este papel")
        return self


# === Schemas de Autenticação ===

class LoginRequest(BaseSchema):
    """Schema de login local."""

    email: EmailStr
    password: str


class LoginResponse(BaseSchema):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UsuarioResponse


class FirebaseLoginRequest(BaseSchema):
    id_token: str = Field(..., description="Token ID do Firebase")
