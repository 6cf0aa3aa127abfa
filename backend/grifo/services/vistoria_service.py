"""
Service de Vistorias.

Criação idempotente (chave gerada pelo app móvel), transições de
status, ambientes, fotos, laudo e finalização.
"""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso
from grifo.core.exceptions import (
    InsufficientPermissionsError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from grifo.core.storage import CategoriaArquivo, StorageService, storage_service
from grifo.models.usuario import UserRole
from grifo.models.vistoria import Ambiente, Foto, StatusVistoria, Vistoria
from grifo.repositories.cliente_repository import ClienteRepository
from grifo.repositories.imovel_repository import ImovelRepository
from grifo.repositories.usuario_repository import UsuarioRepository
from grifo.repositories.vistoria_repository import (
    AmbienteRepository,
    FotoRepository,
    VistoriaRepository,
)
from grifo.schemas.vistoria import (
    AmbienteCreate,
    LaudoUploadResponse,
    VistoriaCreate,
    VistoriaUpdate,
)
from grifo.services.auditoria_service import AuditoriaService
from grifo.services.base import TenantService
from grifo.services.notificacao_service import NotificacaoService
from grifo.workers.drive_tasks import agendar_espelhamento

logger = structlog.get_logger()

# Transições manuais; finalizar e contestar têm operações próprias
TRANSICOES_MANUAIS: dict[StatusVistoria, set[StatusVistoria]] = {
    StatusVistoria.RASCUNHO: {StatusVistoria.EM_ANDAMENTO},
    StatusVistoria.EM_ANDAMENTO: {StatusVistoria.RASCUNHO},
}

STATUS_EDITAVEIS = {StatusVistoria.RASCUNHO, StatusVistoria.EM_ANDAMENTO}


class VistoriaService(TenantService):
    """Service para operações com Vistoria."""

    def __init__(
        self,
        db: AsyncSession,
        ctx: ContextoAcesso,
        storage: StorageService | None = None,
    ):
        super().__init__(db, ctx)
        self._repo = VistoriaRepository(db, ctx.empresa_id)
        self._ambientes = AmbienteRepository(db, ctx.empresa_id)
        self._fotos = FotoRepository(db, ctx.empresa_id)
        self._storage = storage or storage_service
        self._notificacoes = NotificacaoService(db, ctx.empresa_id)
        self._auditoria = AuditoriaService(db)

    # === CONSULTA ===

    async def obter(self, vistoria_id: UUID) -> Vistoria:
        vistoria = await self._repo.get_by_id(vistoria_id)
        if vistoria is None:
            raise ResourceNotFoundError("Vistoria", vistoria_id)
        await self._garantir_empresa_do_recurso(vistoria.empresa_id)
        return vistoria

    async def listar(
        self,
        status: StatusVistoria | None = None,
        imovel_id: UUID | None = None,
        vistoriador_id: UUID | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Vistoria], int]:
        """Lista vistorias; vistoriador só enxerga as próprias."""
        if self._ctx.role == UserRole.VISTORIADOR:
            vistoriador_id = self._ctx.usuario_id
        return await self._repo.listar(status, imovel_id, vistoriador_id, skip, limit)

    def _verificar_responsavel(self, vistoria: Vistoria) -> None:
        if (
            self._ctx.role == UserRole.VISTORIADOR
            and vistoria.vistoriador_id != self._ctx.usuario_id
        ):
            raise InsufficientPermissionsError("operar vistoria de outro vistoriador")

    async def _obter_editavel(self, vistoria_id: UUID, acao: str) -> Vistoria:
        vistoria = await self.obter(vistoria_id)
        self._verificar_responsavel(vistoria)
        if vistoria.status not in STATUS_EDITAVEIS:
            raise InvalidStatusTransitionError(vistoria.id, vistoria.status.value, acao)
        return vistoria

    # === CRIAÇÃO E EDIÇÃO ===

    async def criar(self, dados: VistoriaCreate) -> tuple[Vistoria, bool]:
        """
        Cria vistoria. Repetir a mesma idempotency_key devolve a
        vistoria já criada.

        Returns:
            (vistoria, criada)
        """
        empresa_id = self._exigir_empresa()

        if dados.idempotency_key:
            existente = await self._repo.get_by_idempotency_key(dados.idempotency_key)
            if existente:
                return existente, False

        if dados.status not in STATUS_EDITAVEIS:
            raise ValidationError(
                "Vistoria só pode ser criada como rascunho ou em andamento",
                field="status",
            )

        vistoriador_id = await self._resolver_vistoriador(dados.vistoriador_id)

        if await ImovelRepository(self._db, empresa_id).get_by_id(dados.imovel_id) is None:
            raise ResourceNotFoundError("Imóvel", dados.imovel_id)
        if dados.cliente_id and (
            await ClienteRepository(self._db, empresa_id).get_by_id(dados.cliente_id) is None
        ):
            raise ResourceNotFoundError("Cliente", dados.cliente_id)

        vistoria, criada = await self._repo.create_idempotente(
            dados.idempotency_key,
            imovel_id=dados.imovel_id,
            vistoriador_id=vistoriador_id,
            cliente_id=dados.cliente_id,
            tipo=dados.tipo,
            status=dados.status,
            data_agendada=dados.data_agendada,
            observacoes=dados.observacoes,
        )

        if criada:
            logger.info(
                "Vistoria criada",
                vistoria_id=str(vistoria.id),
                idempotency_key=dados.idempotency_key,
            )
            if vistoria.data_agendada:
                await self._notificacoes.vistoria_agendada(vistoria, vistoria.data_agendada)
        return vistoria, criada

    async def _resolver_vistoriador(self, vistoriador_id: UUID | None) -> UUID:
        if vistoriador_id is None or vistoriador_id == self._ctx.usuario_id:
            if self._ctx.role not in (UserRole.VISTORIADOR, UserRole.ADMIN):
                raise ValidationError("Informe o vistoriador", field="vistoriador_id")
            return self._ctx.usuario_id

        if self._ctx.role == UserRole.VISTORIADOR:
            raise InsufficientPermissionsError("atribuir vistoria a outro vistoriador")

        vistoriador = await UsuarioRepository(self._db, self._empresa_id).get_by_id(
            vistoriador_id
        )
        if vistoriador is None or not vistoriador.is_active:
            raise ResourceNotFoundError("Vistoriador", vistoriador_id)
        if vistoriador.role not in (UserRole.VISTORIADOR, UserRole.ADMIN):
            raise ValidationError(
                "Usuário informado não pode executar vistorias",
                field="vistoriador_id",
            )
        return vistoriador.id

    async def atualizar(self, vistoria_id: UUID, dados: VistoriaUpdate) -> Vistoria:
        vistoria = await self._obter_editavel(vistoria_id, "alterar")
        data_anterior = vistoria.data_agendada

        update_data = dados.model_dump(exclude_unset=True)
        if "vistoriador_id" in update_data and update_data["vistoriador_id"] is not None:
            update_data["vistoriador_id"] = await self._resolver_vistoriador(
                update_data["vistoriador_id"]
            )
        if update_data.get("cliente_id") and (
            await ClienteRepository(self._db, vistoria.empresa_id).get_by_id(
                update_data["cliente_id"]
            )
            is None
        ):
            raise ResourceNotFoundError("Cliente", update_data["cliente_id"])

        vistoria = await self._repo.update(vistoria_id, **update_data)

        if vistoria.data_agendada and vistoria.data_agendada != data_anterior:
            await self._notificacoes.vistoria_agendada(vistoria, vistoria.data_agendada)
        return vistoria

    async def alterar_status(self, vistoria_id: UUID, novo: StatusVistoria) -> Vistoria:
        """Transição manual entre rascunho e em andamento."""
        vistoria = await self.obter(vistoria_id)
        self._verificar_responsavel(vistoria)

        anterior = vistoria.status
        if novo == anterior:
            return vistoria
        if novo not in TRANSICOES_MANUAIS.get(anterior, set()):
            raise InvalidStatusTransitionError(
                vistoria.id, anterior.value, f"mudar para '{novo.value}'"
            )

        if not await self._repo.transicionar_status(vistoria.id, anterior, novo):
            atual = await self._repo.recarregar(vistoria.id)
            raise InvalidStatusTransitionError(
                vistoria.id, atual.status.value if atual else anterior.value, f"mudar para '{novo.value}'"
            )

        vistoria = await self._repo.recarregar(vistoria.id)
        await self._notificacoes.status_alterado(vistoria, anterior)
        return vistoria

    # === FINALIZAÇÃO ===

    async def finalizar(self, vistoria_id: UUID, pdf_url: str) -> tuple[Vistoria, bool]:
        """
        Finaliza a vistoria anexando o laudo.

        A troca de status é um UPDATE condicional (status = em_andamento),
        então duas finalizações concorrentes nunca se sobrepõem. Finalizar
        de novo uma vistoria já finalizada é sucesso sem efeito: pdf_url e
        data_finalizacao originais são mantidos.

        Returns:
            (vistoria, ja_finalizada)

        Raises:
            InvalidStatusTransitionError: status atual não permite finalizar
        """
        vistoria = await self.obter(vistoria_id)
        self._verificar_responsavel(vistoria)

        alterou = await self._repo.finalizar(vistoria.id, pdf_url)
        atual = await self._repo.recarregar(vistoria.id)
        if atual is None:
            raise ResourceNotFoundError("Vistoria", vistoria_id)

        if not alterou:
            if atual.status == StatusVistoria.FINALIZADA:
                logger.info("Vistoria já finalizada", vistoria_id=str(atual.id))
                return atual, True
            raise InvalidStatusTransitionError(atual.id, atual.status.value, "finalizar")

        logger.info("Vistoria finalizada", vistoria_id=str(atual.id))

        # Efeitos best-effort depois do commit
        await self._notificacoes.status_alterado(atual, StatusVistoria.EM_ANDAMENTO)
        await self._notificacoes.laudo_disponivel(atual)
        await self._auditoria.registrar(
            self._ctx,
            "vistoria.finalizar",
            "vistoria",
            atual.id,
            empresa_id=atual.empresa_id,
            detalhes={"pdf_url": pdf_url},
            preservar=(atual,),
        )
        agendar_espelhamento(atual.id, atual.empresa_id)
        return atual, False

    # === AMBIENTES ===

    async def criar_ambiente(
        self,
        vistoria_id: UUID,
        dados: AmbienteCreate,
    ) -> tuple[Ambiente, bool]:
        if dados.idempotency_key:
            existente = await self._ambientes.get_by_idempotency_key(dados.idempotency_key)
            if existente:
                return existente, False

        vistoria = await self._obter_editavel(vistoria_id, "adicionar ambiente a")
        ambientes = AmbienteRepository(self._db, vistoria.empresa_id)
        return await ambientes.create_idempotente(
            dados.idempotency_key,
            vistoria_id=vistoria.id,
            nome=dados.nome,
            ordem=dados.ordem,
            observacoes=dados.observacoes,
        )

    async def listar_ambientes(self, vistoria_id: UUID) -> list[Ambiente]:
        vistoria = await self.obter(vistoria_id)
        return await self._ambientes.listar_por_vistoria(vistoria.id)

    # === FOTOS ===

    async def enviar_foto(
        self,
        vistoria_id: UUID,
        conteudo: bytes,
        filename: str,
        content_type: str,
        ambiente_id: UUID | None = None,
        legenda: str | None = None,
        ordem: int = 0,
        idempotency_key: str | None = None,
    ) -> tuple[Foto, bool]:
        """
        Envia foto ao storage e registra.

        Com idempotency_key repetida, nada é reenviado ao storage.
        """
        if idempotency_key:
            existente = await self._fotos.get_by_idempotency_key(idempotency_key)
            if existente:
                return existente, False

        vistoria = await self._obter_editavel(vistoria_id, "adicionar foto a")
        if ambiente_id is not None:
            ambiente = await self._ambientes.get_by_id(ambiente_id)
            if ambiente is None or ambiente.vistoria_id != vistoria.id:
                raise ResourceNotFoundError("Ambiente", ambiente_id)

        storage_path = await self._storage.upload_file(
            conteudo,
            filename,
            content_type,
            vistoria.empresa_id,
            vistoria.id,
            CategoriaArquivo.FOTO,
        )

        fotos = FotoRepository(self._db, vistoria.empresa_id)
        return await fotos.create_idempotente(
            idempotency_key,
            vistoria_id=vistoria.id,
            ambiente_id=ambiente_id,
            storage_path=storage_path,
            url=self._storage.public_url(storage_path),
            legenda=legenda,
            ordem=ordem,
        )

    async def listar_fotos(
        self,
        vistoria_id: UUID,
        ambiente_id: UUID | None = None,
    ) -> list[Foto]:
        vistoria = await self.obter(vistoria_id)
        return await self._fotos.listar_por_vistoria(vistoria.id, ambiente_id)

    # === LAUDO ===

    async def enviar_laudo(
        self,
        vistoria_id: UUID,
        conteudo: bytes,
        filename: str,
        content_type: str,
    ) -> LaudoUploadResponse:
        """Envia o PDF do laudo; a URL devolvida é usada na finalização."""
        vistoria = await self.obter(vistoria_id)
        self._verificar_responsavel(vistoria)
        if vistoria.status != StatusVistoria.EM_ANDAMENTO:
            raise InvalidStatusTransitionError(
                vistoria.id, vistoria.status.value, "enviar laudo para"
            )

        storage_path = await self._storage.upload_file(
            conteudo,
            filename,
            content_type,
            vistoria.empresa_id,
            vistoria.id,
            CategoriaArquivo.RELATORIO,
        )
        return LaudoUploadResponse(
            storage_path=storage_path,
            pdf_url=self._storage.public_url(storage_path),
        )
