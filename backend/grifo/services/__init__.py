"""
Services Layer.

Camada de lógica de negócio do Grifo Vistorias.
"""

from grifo.services.auditoria_service import AuditoriaService
from grifo.services.auth_service import AuthService
from grifo.services.cliente_service import AtendimentoPublicoService, SolicitacaoService
from grifo.services.configuracao_service import ConfiguracaoService
from grifo.services.contestacao_service import ContestacaoPublicaService, ContestacaoService
from grifo.services.dashboard_service import DashboardService
from grifo.services.empresa_service import EmpresaService
from grifo.services.imovel_service import ImovelService
from grifo.services.notificacao_service import NotificacaoService
from grifo.services.relatorio_service import RelatorioService
from grifo.services.usuario_service import UsuarioService
from grifo.services.vistoria_service import VistoriaService

__all__ = [
    "AtendimentoPublicoService",
    "AuditoriaService",
    "AuthService",
    "ConfiguracaoService",
    "ContestacaoPublicaService",
    "ContestacaoService",
    "DashboardService",
    "EmpresaService",
    "ImovelService",
    "NotificacaoService",
    "RelatorioService",
    "SolicitacaoService",
    "UsuarioService",
    "VistoriaService",
]
