"""Repositories - Data Access Layer."""

from grifo.repositories.auditoria_repository import AuditoriaRepository
from grifo.repositories.base import BaseRepository, MultiTenantRepository
from grifo.repositories.cliente_repository import ClienteRepository, SolicitacaoRepository
from grifo.repositories.contestacao_repository import (
    ContestacaoRepository,
    LinkContestacaoRepository,
)
from grifo.repositories.empresa_repository import EmpresaRepository
from grifo.repositories.imovel_repository import ImovelRepository
from grifo.repositories.notificacao_repository import NotificacaoRepository
from grifo.repositories.usuario_repository import UsuarioRepository
from grifo.repositories.vistoria_repository import (
    AmbienteRepository,
    FotoRepository,
    IdempotentRepository,
    VistoriaRepository,
)

__all__ = [
    # Base
    "BaseRepository",
    "MultiTenantRepository",
    "IdempotentRepository",
    # Entidades
    "EmpresaRepository",
    "UsuarioRepository",
    "ImovelRepository",
    "VistoriaRepository",
    "AmbienteRepository",
    "FotoRepository",
    "ClienteRepository",
    "SolicitacaoRepository",
    "LinkContestacaoRepository",
    "ContestacaoRepository",
    "NotificacaoRepository",
    "AuditoriaRepository",
]
