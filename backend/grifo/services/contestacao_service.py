"""
Services de contestação de laudo.

A empresa gera um link de uso único para uma vistoria finalizada; o
cliente abre o link na área pública e registra a contestação, o que
leva a vistoria para o status contestada.
"""

from datetime import timedelta
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso, garantir_empresa_ativa
from grifo.core.exceptions import (
    ContestLinkInvalidError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
)
from grifo.core.security import generate_public_token
from grifo.db.base import utcnow
from grifo.models.contestacao import Contestacao, LinkContestacao
from grifo.models.vistoria import StatusVistoria, Vistoria
from grifo.repositories.contestacao_repository import (
    ContestacaoRepository,
    LinkContestacaoRepository,
)
from grifo.repositories.vistoria_repository import VistoriaRepository
from grifo.schemas.contestacao import ContestacaoCreate, ContestacaoPublica
from grifo.schemas.empresa import ConfiguracoesEmpresa
from grifo.services.auditoria_service import AuditoriaService
from grifo.services.base import TenantService
from grifo.services.notificacao_service import NotificacaoService

logger = structlog.get_logger()


class ContestacaoService(TenantService):
    """Links e contestações vistos pela empresa."""

    def __init__(self, db: AsyncSession, ctx: ContextoAcesso):
        super().__init__(db, ctx)
        self._vistorias = VistoriaRepository(db, ctx.empresa_id)
        self._repo = ContestacaoRepository(db, ctx.empresa_id)

    async def _obter_vistoria(self, vistoria_id: UUID) -> Vistoria:
        vistoria = await self._vistorias.get_by_id(vistoria_id)
        if vistoria is None:
            raise ResourceNotFoundError("Vistoria", vistoria_id)
        await self._garantir_empresa_do_recurso(vistoria.empresa_id)
        return vistoria

    async def gerar_link(self, vistoria_id: UUID) -> LinkContestacao:
        """Gera link de contestação para uma vistoria finalizada."""
        vistoria = await self._obter_vistoria(vistoria_id)
        if vistoria.status != StatusVistoria.FINALIZADA:
            raise InvalidStatusTransitionError(
                vistoria.id, vistoria.status.value, "gerar link de contestação para"
            )

        empresa = await garantir_empresa_ativa(self._db, vistoria.empresa_id)
        validade = ConfiguracoesEmpresa.da_empresa(empresa).contestacao.validade_link_dias

        link = await LinkContestacaoRepository(self._db, vistoria.empresa_id).create(
            vistoria_id=vistoria.id,
            token=generate_public_token(),
            expira_em=utcnow() + timedelta(days=validade),
            utilizado=False,
        )
        await AuditoriaService(self._db).registrar(
            self._ctx,
            "contestacao.gerar_link",
            "vistoria",
            vistoria.id,
            empresa_id=vistoria.empresa_id,
            preservar=(link,),
        )
        return link

    async def listar(self, vistoria_id: UUID) -> list[Contestacao]:
        vistoria = await self._obter_vistoria(vistoria_id)
        return await self._repo.listar_por_vistoria(vistoria.id)

    async def resolver(self, contestacao_id: UUID) -> Contestacao:
        contestacao = await self._repo.get_by_id(contestacao_id)
        if contestacao is None:
            raise ResourceNotFoundError("Contestação", contestacao_id)
        await self._garantir_empresa_do_recurso(contestacao.empresa_id)
        return await self._repo.update(contestacao.id, resolvida=True)


class ContestacaoPublicaService:
    """Página pública de contestação (acesso por token)."""

    def __init__(self, db: AsyncSession):
        self._db = db
        self._links = LinkContestacaoRepository(db, None)

    async def _link_valido(self, token: str) -> LinkContestacao:
        link = await self._links.get_by_token(token)
        if link is None or not link.is_valido:
            raise ContestLinkInvalidError()
        await garantir_empresa_ativa(self._db, link.empresa_id)
        return link

    async def obter(self, token: str) -> ContestacaoPublica:
        link = await self._link_valido(token)
        vistoria = await VistoriaRepository(self._db, link.empresa_id).get_by_id(
            link.vistoria_id
        )
        if vistoria is None:
            raise ContestLinkInvalidError()
        return ContestacaoPublica(
            vistoria_id=vistoria.id,
            tipo=vistoria.tipo,
            status=vistoria.status,
            data_finalizacao=vistoria.data_finalizacao,
            pdf_url=vistoria.pdf_url,
            expira_em=link.expira_em,
        )

    async def contestar(self, token: str, dados: ContestacaoCreate) -> Contestacao:
        """
        Registra a contestação.

        Consumo do link, troca de status e gravação da contestação são
        confirmados no mesmo commit.
        """
        link = await self._link_valido(token)
        # rollback expira o link; os ids ficam guardados antes
        link_id, vistoria_id, empresa_id = link.id, link.vistoria_id, link.empresa_id
        vistorias = VistoriaRepository(self._db, empresa_id)

        if not await self._links.marcar_utilizado(link_id):
            await self._db.rollback()
            raise ContestLinkInvalidError()

        if not await vistorias.transicionar_status(
            vistoria_id,
            StatusVistoria.FINALIZADA,
            StatusVistoria.CONTESTADA,
            commit=False,
            token_contestacao=token,
        ):
            await self._db.rollback()
            atual = await vistorias.recarregar(vistoria_id)
            raise InvalidStatusTransitionError(
                vistoria_id,
                atual.status.value if atual else "inexistente",
                "contestar",
            )

        contestacao = Contestacao(
            empresa_id=empresa_id,
            vistoria_id=vistoria_id,
            link_id=link_id,
            nome_contestante=dados.nome_contestante,
            email_contestante=dados.email_contestante,
            motivo=dados.motivo,
            resolvida=False,
        )
        self._db.add(contestacao)
        await self._db.commit()
        await self._db.refresh(contestacao)

        logger.info(
            "Laudo contestado",
            vistoria_id=str(vistoria_id),
            contestacao_id=str(contestacao.id),
        )

        vistoria = await vistorias.recarregar(vistoria_id)
        await NotificacaoService(self._db, empresa_id).status_alterado(
            vistoria, StatusVistoria.FINALIZADA
        )
        await AuditoriaService(self._db).registrar(
            None,
            "vistoria.contestar",
            "vistoria",
            vistoria.id,
            empresa_id=vistoria.empresa_id,
            detalhes={"contestacao_id": str(contestacao.id)},
            preservar=(contestacao, vistoria),
        )
        return contestacao
