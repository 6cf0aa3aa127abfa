"""
Schemas da Empresa (tenant).
"""

from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from grifo.core.config import settings
from grifo.models.empresa import Empresa
from grifo.schemas.base import BaseSchema, IDMixin, TimestampMixin


class EmpresaBase(BaseSchema):
    nome: str = Field(..., min_length=2, max_length=255)
    cnpj: str = Field(..., description="CNPJ da empresa")
    email: EmailStr | None = None
    telefone: str | None = None

    @field_validator("cnpj", mode="before")
    @classmethod
    def validate_cnpj(cls, v: str) -> str:
        """Valida CNPJ (validação básica de formato)."""
        numbers = "".join(filter(str.isdigit, str(v)))
        if len(numbers) != 14:
            raise ValueError("CNPJ deve conter 14 dígitos")
        return v


class EmpresaCreate(EmpresaBase):
    """Schema para provisionamento de empresa."""

    storage_mb: int | None = Field(None, gt=0)


class EmpresaUpdate(BaseSchema):
    """Schema para atualização parcial de empresa."""

    nome: str | None = Field(None, min_length=2, max_length=255)
    email: EmailStr | None = None
    telefone: str | None = None
    storage_mb: int | None = Field(None, gt=0)


class EmpresaResponse(EmpresaBase, IDMixin, TimestampMixin):
    ativa: bool
    storage_mb: int


class EmpresaUso(BaseSchema):
    """Uso de recursos de uma empresa."""

    empresa_id: UUID
    nome: str
    ativa: bool
    storage_mb: int
    total_usuarios: int
    total_imoveis: int
    total_vistorias: int
    total_fotos: int


# === Configurações da empresa ===

class ConfiguracoesNotificacoes(BaseSchema):
    email: bool = True
    push: bool = True
    lembretes_vistoria: bool = True
    laudo_disponivel: bool = True


class ConfiguracoesVistoria(BaseSchema):
    fotos_obrigatorias: bool = False
    min_fotos_por_ambiente: int = Field(0, ge=0, le=20)
    permitir_offline: bool = True
    prazo_execucao_horas: int = Field(48, ge=1, le=168)


class ConfiguracoesLaudo(BaseSchema):
    incluir_fotos: bool = True
    modelo: Literal["padrao", "detalhado", "resumido"] = "padrao"
    marca_dagua: bool = False


class ConfiguracoesContestacao(BaseSchema):
    validade_link_dias: int = Field(
        default_factory=lambda: settings.CONTEST_LINK_EXPIRE_DAYS, ge=1, le=90
    )


class ConfiguracoesMarca(BaseSchema):
    logo_url: str | None = Field(None, max_length=500)
    rodape: str | None = Field(None, max_length=200)


class ConfiguracoesEmpresa(BaseSchema):
    """
    Preferências operacionais da empresa.

    Seções ausentes no banco assumem os valores padrão.
    """

    notificacoes: ConfiguracoesNotificacoes = Field(default_factory=ConfiguracoesNotificacoes)
    vistoria: ConfiguracoesVistoria = Field(default_factory=ConfiguracoesVistoria)
    laudo: ConfiguracoesLaudo = Field(default_factory=ConfiguracoesLaudo)
    contestacao: ConfiguracoesContestacao = Field(default_factory=ConfiguracoesContestacao)
    marca: ConfiguracoesMarca = Field(default_factory=ConfiguracoesMarca)

    @classmethod
    def da_empresa(cls, empresa: Empresa) -> "ConfiguracoesEmpresa":
        return cls.model_validate(empresa.configuracoes or {})


class ConfiguracoesUpdate(BaseSchema):
    """Atualização parcial: só os campos enviados são alterados."""

    notificacoes: ConfiguracoesNotificacoes | None = None
    vistoria: ConfiguracoesVistoria | None = None
    laudo: ConfiguracoesLaudo | None = None
    contestacao: ConfiguracoesContestacao | None = None
    marca: ConfiguracoesMarca | None = None
