"""
Modelos SQLAlchemy do Grifo Vistorias.

Importa todos os modelos para garantir que são registrados no metadata.
"""

from grifo.models.auditoria import RegistroAuditoria
from grifo.models.cliente import (
    Cliente,
    SolicitacaoVistoria,
    StatusSolicitacao,
    UrgenciaSolicitacao,
)
from grifo.models.contestacao import Contestacao, LinkContestacao
from grifo.models.empresa import Empresa
from grifo.models.imovel import Imovel, TipoImovel
from grifo.models.notificacao import Notificacao, TipoDestinatario, TipoNotificacao
from grifo.models.usuario import UserRole, Usuario
from grifo.models.vistoria import Ambiente, Foto, StatusVistoria, TipoVistoria, Vistoria

__all__ = [
    # Empresa e Usuário
    "Empresa",
    "Usuario",
    "UserRole",
    # Imóvel
    "Imovel",
    "TipoImovel",
    # Vistoria
    "Vistoria",
    "Ambiente",
    "Foto",
    "TipoVistoria",
    "StatusVistoria",
    # Cliente
    "Cliente",
    "SolicitacaoVistoria",
    "StatusSolicitacao",
    "UrgenciaSolicitacao",
    # Contestação
    "LinkContestacao",
    "Contestacao",
    # Notificações
    "Notificacao",
    "TipoNotificacao",
    "TipoDestinatario",
    # Auditoria
    "RegistroAuditoria",
]
