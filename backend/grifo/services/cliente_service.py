"""
Services de Cliente e Solicitação de Vistoria.

O cadastro do cliente e o envio da solicitação acontecem na área
pública (sem login); a decisão é tomada pelos administradores.
"""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso, garantir_empresa_ativa
from grifo.core.exceptions import (
    BusinessRuleError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from grifo.models.cliente import Cliente, SolicitacaoVistoria, StatusSolicitacao
from grifo.repositories.cliente_repository import ClienteRepository, SolicitacaoRepository
from grifo.schemas.cliente import ClienteCreate, SolicitacaoCreate, SolicitacaoDecisao
from grifo.services.auditoria_service import AuditoriaService
from grifo.services.base import TenantService
from grifo.services.notificacao_service import NotificacaoService

logger = structlog.get_logger()

STATUS_DECIDIVEIS = {StatusSolicitacao.PENDENTE, StatusSolicitacao.ALTERACOES_SOLICITADAS}


class AtendimentoPublicoService:
    """Operações da área pública do cliente."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def cadastrar_cliente(self, dados: ClienteCreate) -> Cliente:
        await garantir_empresa_ativa(self._db, dados.empresa_id)

        repo = ClienteRepository(self._db, dados.empresa_id)
        if await repo.get_by_email(dados.email):
            raise ResourceAlreadyExistsError("Cliente", "email", dados.email)

        cliente = await repo.create(
            nome=dados.nome,
            email=dados.email.lower(),
            telefone=dados.telefone,
        )
        logger.info("Cliente cadastrado", cliente_id=str(cliente.id))
        return cliente

    async def obter_cliente(self, cliente_id: UUID) -> Cliente:
        cliente = await ClienteRepository(self._db, None).get_by_id(cliente_id)
        if cliente is None:
            raise ResourceNotFoundError("Cliente", cliente_id)
        await garantir_empresa_ativa(self._db, cliente.empresa_id)
        return cliente

    async def solicitar_vistoria(self, dados: SolicitacaoCreate) -> SolicitacaoVistoria:
        """Registra a solicitação e avisa os administradores da empresa."""
        cliente = await self.obter_cliente(dados.cliente_id)

        solicitacao = await SolicitacaoRepository(self._db, cliente.empresa_id).create(
            cliente_id=cliente.id,
            endereco_imovel=dados.endereco_imovel,
            tipo=dados.tipo,
            urgencia=dados.urgencia,
            status=StatusSolicitacao.PENDENTE,
            observacoes=dados.observacoes,
        )
        logger.info("Solicitação de vistoria criada", solicitacao_id=str(solicitacao.id))

        await NotificacaoService(self._db, cliente.empresa_id).solicitacao_criada(
            solicitacao, cliente
        )
        return solicitacao


class SolicitacaoService(TenantService):
    """Gestão de clientes e solicitações pela empresa."""

    def __init__(self, db: AsyncSession, ctx: ContextoAcesso):
        super().__init__(db, ctx)
        self._clientes = ClienteRepository(db, ctx.empresa_id)
        self._repo = SolicitacaoRepository(db, ctx.empresa_id)

    async def listar_clientes(
        self,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Cliente], int]:
        return await self._clientes.get_all(skip, limit), await self._clientes.count()

    async def listar(
        self,
        status: StatusSolicitacao | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[SolicitacaoVistoria], int]:
        return await self._repo.listar(status, skip, limit)

    async def obter(self, solicitacao_id: UUID) -> SolicitacaoVistoria:
        solicitacao = await self._repo.get_by_id(solicitacao_id)
        if solicitacao is None:
            raise ResourceNotFoundError("Solicitação", solicitacao_id)
        await self._garantir_empresa_do_recurso(solicitacao.empresa_id)
        return solicitacao

    async def decidir(
        self,
        solicitacao_id: UUID,
        dados: SolicitacaoDecisao,
    ) -> SolicitacaoVistoria:
        """
        Aprova, rejeita ou pede alterações e avisa o cliente.

        Raises:
            ValidationError: decisão "pendente"
            BusinessRuleError: solicitação já aprovada ou rejeitada
        """
        if dados.status == StatusSolicitacao.PENDENTE:
            raise ValidationError("Decisão inválida", field="status")

        solicitacao = await self.obter(solicitacao_id)
        if solicitacao.status not in STATUS_DECIDIVEIS:
            raise BusinessRuleError(
                f"Solicitação já está {solicitacao.status.value}",
                rule="SOLICITACAO_JA_DECIDIDA",
            )

        solicitacao = await self._repo.update(
            solicitacao.id,
            status=dados.status,
            comentario_decisao=dados.comentario,
        )
        logger.info(
            "Solicitação decidida",
            solicitacao_id=str(solicitacao.id),
            status=dados.status.value,
        )

        await NotificacaoService(self._db, solicitacao.empresa_id).solicitacao_decidida(
            solicitacao
        )
        await AuditoriaService(self._db).registrar(
            self._ctx,
            "solicitacao.decidir",
            "solicitacao",
            solicitacao.id,
            empresa_id=solicitacao.empresa_id,
            detalhes={"status": dados.status.value},
            preservar=(solicitacao,),
        )
        return solicitacao
