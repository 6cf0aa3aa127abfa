"""Schemas Pydantic para validação de request/response."""

from grifo.schemas.base import (
    APIResponse,
    BaseSchema,
    ErrorDetail,
    ErrorResponse,
    IDMixin,
    PaginatedResponse,
    TimestampMixin,
)
from grifo.schemas.cliente import (
    ClienteCreate,
    ClienteResponse,
    SolicitacaoCreate,
    SolicitacaoDecisao,
    SolicitacaoResponse,
)
from grifo.schemas.contestacao import (
    ContestacaoCreate,
    ContestacaoPublica,
    ContestacaoResponse,
    LinkContestacaoResponse,
)
from grifo.schemas.dashboard import DashboardStats, VistoriasPorStatus
from grifo.schemas.empresa import (
    ConfiguracoesEmpresa,
    ConfiguracoesUpdate,
    EmpresaCreate,
    EmpresaResponse,
    EmpresaUpdate,
    EmpresaUso,
)
from grifo.schemas.imovel import ImovelCreate, ImovelResponse, ImovelUpdate
from grifo.schemas.relatorio import RelatorioSolicitacoes, RelatorioVistorias
from grifo.schemas.notificacao import (
    MetadadosNotificacao,
    NotificacaoContagem,
    NotificacaoResponse,
    metadados_adapter,
)
from grifo.schemas.usuario import (
    AtribuirPapelRequest,
    FirebaseLoginRequest,
    LoginRequest,
    LoginResponse,
    UsuarioCreate,
    UsuarioResponse,
    UsuarioUpdate,
)
from grifo.schemas.vistoria import (
    AmbienteCreate,
    AmbienteResponse,
    FinalizacaoResponse,
    FinalizarVistoriaRequest,
    FotoResponse,
    LaudoUploadResponse,
    VistoriaCreate,
    VistoriaResponse,
    VistoriaStatusUpdate,
    VistoriaUpdate,
)

__all__ = [
    # Base
    "APIResponse",
    "BaseSchema",
    "ErrorDetail",
    "ErrorResponse",
    "IDMixin",
    "PaginatedResponse",
    "TimestampMixin",
    # Empresa
    "EmpresaCreate",
    "EmpresaResponse",
    "EmpresaUpdate",
    "EmpresaUso",
    "ConfiguracoesEmpresa",
    "ConfiguracoesUpdate",
    # Usuário
    "AtribuirPapelRequest",
    "FirebaseLoginRequest",
    "LoginRequest",
    "LoginResponse",
    "UsuarioCreate",
    "UsuarioResponse",
    "UsuarioUpdate",
    # Imóvel
    "ImovelCreate",
    "ImovelResponse",
    "ImovelUpdate",
    # Vistoria
    "AmbienteCreate",
    "AmbienteResponse",
    "FinalizacaoResponse",
    "FinalizarVistoriaRequest",
    "FotoResponse",
    "LaudoUploadResponse",
    "VistoriaCreate",
    "VistoriaResponse",
    "VistoriaStatusUpdate",
    "VistoriaUpdate",
    # Cliente
    "ClienteCreate",
    "ClienteResponse",
    "SolicitacaoCreate",
    "SolicitacaoDecisao",
    "SolicitacaoResponse",
    # Contestação
    "ContestacaoCreate",
    "ContestacaoPublica",
    "ContestacaoResponse",
    "LinkContestacaoResponse",
    # Notificação
    "MetadadosNotificacao",
    "NotificacaoContagem",
    "NotificacaoResponse",
    "metadados_adapter",
    # Dashboard
    "DashboardStats",
    "VistoriasPorStatus",
    # Relatórios
    "RelatorioSolicitacoes",
    "RelatorioVistorias",
]
