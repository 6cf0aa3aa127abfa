"""
Fila de sincronização offline do app de vistoria.

Rascunhos de vistoria, ambientes, fotos e laudos são gravados no banco
local e enviados à API quando há conexão. Regras da drenagem:

- uma drenagem por vez (``asyncio.Lock``); chamada concorrente retorna
  sem fazer nada
- rascunhos primeiro, na ordem de criação; depois os uploads de cada
  vistoria, fotos antes do laudo
- laudo de vistoria com foto em erro também vai para erro, com o nome
  das fotos em ultimo_erro; reenviar a foto e depois o laudo
- o id local vai como chave de idempotência em toda criação, então
  reenviar um item já aceito pelo servidor não duplica nada
- arquivos locais só são apagados depois de confirmados pelo servidor
"""

import asyncio
from contextlib import suppress
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.config import settings
from grifo.core.exceptions import (
    AuthenticationError,
    BusinessRuleError,
    GrifoException,
    ResourceNotFoundError,
    UpstreamUnavailableError,
)
from grifo.models.vistoria import StatusVistoria, TipoVistoria
from grifo.sync.models import (
    AmbienteRascunho,
    EstadoSync,
    FotoLocal,
    ItemUpload,
    TipoUpload,
    VistoriaRascunho,
)
from grifo.sync.remote import ClienteRemoto
from grifo.sync.store import ArmazenamentoLocal

logger = structlog.get_logger()

PENDENTES = (EstadoSync.LOCAL_ONLY, EstadoSync.PENDING_SYNC)

ItemDaFila = VistoriaRascunho | ItemUpload


@dataclass
class ResultadoDrenagem:
    executada: bool = True
    sincronizados: int = 0
    falhas: int = 0
    # Itens cujo pai ainda não existe no servidor
    ignorados: int = 0
    # Servidor recusou o token (401)
    interrompida: bool = False


@dataclass
class EstatisticasFila:
    rascunhos_pendentes: int
    fotos_pendentes: int
    pdfs_pendentes: int
    erros: int


async def _ler_arquivo(caminho: str) -> bytes:
    return await asyncio.to_thread(Path(caminho).read_bytes)


async def _apagar_arquivo(caminho: str) -> None:
    await asyncio.to_thread(Path(caminho).unlink, missing_ok=True)


class FilaSincronizacao:
    """
    Fila durável de envio ao servidor.

    Uso:
        fila = FilaSincronizacao(armazenamento, ClienteRemoto(url, token))
        rascunho = await fila.registrar_vistoria(imovel_id, TipoVistoria.ENTRADA)
        await fila.registrar_foto(rascunho.local_id, "/fotos/sala.jpg")
        await fila.conectividade_restaurada()
    """

    def __init__(
        self,
        armazenamento: ArmazenamentoLocal,
        remoto: ClienteRemoto,
        max_tentativas: int | None = None,
        intervalo_segundos: float | None = None,
    ):
        self._armazenamento = armazenamento
        self._remoto = remoto
        self.max_tentativas = max_tentativas or settings.SYNC_MAX_TENTATIVAS
        self.intervalo_segundos = intervalo_segundos or settings.SYNC_INTERVALO_SEGUNDOS
        self._lock = asyncio.Lock()
        self._agendamento: asyncio.Task | None = None

    @property
    def drenando(self) -> bool:
        return self._lock.locked()

    # === REGISTRO LOCAL ===

    async def registrar_vistoria(
        self,
        imovel_id: UUID,
        tipo: TipoVistoria,
        cliente_id: UUID | None = None,
        data_agendada: datetime | None = None,
        observacoes: str | None = None,
    ) -> VistoriaRascunho:
        async with self._armazenamento.sessao() as session:
            rascunho = VistoriaRascunho(
                imovel_id=imovel_id,
                tipo=tipo,
                cliente_id=cliente_id,
                data_agendada=data_agendada,
                observacoes=observacoes,
                estado=EstadoSync.LOCAL_ONLY,
                tentativas=0,
            )
            session.add(rascunho)
            await session.commit()
            logger.info("Rascunho de vistoria registrado", local_id=str(rascunho.local_id))
            return rascunho

    async def _obter_rascunho(
        self,
        session: AsyncSession,
        vistoria_local_id: UUID,
    ) -> VistoriaRascunho:
        rascunho = await session.get(VistoriaRascunho, vistoria_local_id)
        if rascunho is None:
            raise ResourceNotFoundError("Vistoria rascunho", vistoria_local_id)
        return rascunho

    async def registrar_ambiente(
        self,
        vistoria_local_id: UUID,
        nome: str,
        ordem: int = 0,
        observacoes: str | None = None,
    ) -> AmbienteRascunho:
        """
        Registra ambiente. Se a vistoria já foi sincronizada ela volta
        para a fila para que o ambiente seja enviado.
        """
        async with self._armazenamento.sessao() as session:
            rascunho = await self._obter_rascunho(session, vistoria_local_id)
            ambiente = AmbienteRascunho(
                vistoria_local_id=rascunho.local_id,
                nome=nome,
                ordem=ordem,
                observacoes=observacoes,
            )
            session.add(ambiente)
            if rascunho.estado == EstadoSync.SYNCED:
                rascunho.estado = EstadoSync.LOCAL_ONLY
                rascunho.tentativas = 0
            await session.commit()
            return ambiente

    async def registrar_foto(
        self,
        vistoria_local_id: UUID,
        caminho_arquivo: str,
        ambiente_local_id: UUID | None = None,
        legenda: str | None = None,
        ordem: int = 0,
        content_type: str = "image/jpeg",
    ) -> FotoLocal:
        """Registra a foto e enfileira o upload dela."""
        async with self._armazenamento.sessao() as session:
            rascunho = await self._obter_rascunho(session, vistoria_local_id)

            ambiente_id_servidor = None
            if ambiente_local_id is not None:
                ambiente = await session.get(AmbienteRascunho, ambiente_local_id)
                if ambiente is None or ambiente.vistoria_local_id != rascunho.local_id:
                    raise ResourceNotFoundError("Ambiente rascunho", ambiente_local_id)
                ambiente_id_servidor = ambiente.server_id

            foto = FotoLocal(
                vistoria_local_id=rascunho.local_id,
                ambiente_local_id=ambiente_local_id,
                ambiente_id_servidor=ambiente_id_servidor,
                caminho_arquivo=caminho_arquivo,
                content_type=content_type,
                legenda=legenda,
                ordem=ordem,
            )
            session.add(foto)
            await session.flush()

            session.add(
                ItemUpload(
                    tipo=TipoUpload.FOTO,
                    vistoria_local_id=rascunho.local_id,
                    vistoria_id_servidor=rascunho.server_id,
                    foto_local_id=foto.local_id,
                    caminho_arquivo=caminho_arquivo,
                    estado=EstadoSync.LOCAL_ONLY,
                    tentativas=0,
                )
            )
            await session.commit()
            return foto

    async def registrar_laudo(
        self,
        vistoria_local_id: UUID,
        caminho_arquivo: str,
    ) -> ItemUpload:
        """Enfileira o PDF do laudo; o envio termina com a finalização."""
        async with self._armazenamento.sessao() as session:
            rascunho = await self._obter_rascunho(session, vistoria_local_id)
            item = ItemUpload(
                tipo=TipoUpload.PDF,
                vistoria_local_id=rascunho.local_id,
                vistoria_id_servidor=rascunho.server_id,
                caminho_arquivo=caminho_arquivo,
                estado=EstadoSync.LOCAL_ONLY,
                tentativas=0,
            )
            session.add(item)
            await session.commit()
            return item

    # === DRENAGEM ===

    async def drenar(self) -> ResultadoDrenagem:
        """Executa uma passada completa pela fila."""
        if self._lock.locked():
            logger.debug("Drenagem já em andamento")
            return ResultadoDrenagem(executada=False)

        async with self._lock:
            resultado = ResultadoDrenagem()
            async with self._armazenamento.sessao() as session:
                await self._marcar_pendentes(session)
                try:
                    await self._drenar_rascunhos(session, resultado)
                    await self._drenar_uploads(session, resultado)
                except AuthenticationError as e:
                    resultado.interrompida = True
                    logger.warning("Drenagem interrompida: sessão expirada", error=e.message)

            logger.info("Drenagem concluída", **asdict(resultado))
            return resultado

    async def _marcar_pendentes(self, session: AsyncSession) -> None:
        for model in (VistoriaRascunho, ItemUpload):
            await session.execute(
                update(model)
                .where(model.estado == EstadoSync.LOCAL_ONLY)
                .values(estado=EstadoSync.PENDING_SYNC)
            )
        await session.commit()

    async def _processar(
        self,
        session: AsyncSession,
        item: ItemDaFila,
        resultado: ResultadoDrenagem,
        envio: Any,
    ) -> None:
        try:
            await envio
        except AuthenticationError:
            raise
        except (UpstreamUnavailableError, OSError) as e:
            mensagem = e.message if isinstance(e, GrifoException) else str(e)
            await self._falha_retentavel(session, item, mensagem)
            resultado.falhas += 1
            return
        except GrifoException as e:
            await self._falha_terminal(session, item, e.message)
            resultado.falhas += 1
            return

        item.tentativas += 1
        item.estado = EstadoSync.SYNCED
        item.ultimo_erro = None
        await session.commit()
        resultado.sincronizados += 1

    async def _falha_retentavel(
        self,
        session: AsyncSession,
        item: ItemDaFila,
        mensagem: str,
    ) -> None:
        item.tentativas += 1
        item.ultimo_erro = mensagem
        if item.tentativas >= self.max_tentativas:
            item.estado = EstadoSync.ERROR
        else:
            item.estado = EstadoSync.PENDING_SYNC
        await session.commit()
        logger.warning(
            "Falha retentável na sincronização",
            local_id=str(item.local_id),
            tentativas=item.tentativas,
            estado=item.estado.value,
            error=mensagem,
        )

    async def _falha_terminal(
        self,
        session: AsyncSession,
        item: ItemDaFila,
        mensagem: str,
    ) -> None:
        item.tentativas += 1
        item.ultimo_erro = mensagem
        item.estado = EstadoSync.ERROR
        await session.commit()
        logger.error(
            "Item recusado pelo servidor",
            local_id=str(item.local_id),
            error=mensagem,
        )

    # --- rascunhos ---

    async def _drenar_rascunhos(
        self,
        session: AsyncSession,
        resultado: ResultadoDrenagem,
    ) -> None:
        result = await session.execute(
            select(VistoriaRascunho)
            .where(VistoriaRascunho.estado == EstadoSync.PENDING_SYNC)
            .order_by(VistoriaRascunho.criado_em)
        )
        for rascunho in result.scalars().all():
            await self._processar(
                session, rascunho, resultado, self._enviar_rascunho(session, rascunho)
            )

    @staticmethod
    def _payload_vistoria(rascunho: VistoriaRascunho) -> dict[str, Any]:
        return {
            "imovel_id": str(rascunho.imovel_id),
            "tipo": rascunho.tipo.value,
            # O app cria vistorias já em execução
            "status": StatusVistoria.EM_ANDAMENTO.value,
            "cliente_id": str(rascunho.cliente_id) if rascunho.cliente_id else None,
            "data_agendada": (
                rascunho.data_agendada.isoformat() if rascunho.data_agendada else None
            ),
            "observacoes": rascunho.observacoes,
        }

    async def _enviar_rascunho(
        self,
        session: AsyncSession,
        rascunho: VistoriaRascunho,
    ) -> None:
        """Cria a vistoria e os ambientes que ainda não têm id do servidor."""
        if rascunho.server_id is None:
            dados = await self._remoto.criar_vistoria(
                self._payload_vistoria(rascunho),
                idempotency_key=str(rascunho.local_id),
            )
            rascunho.server_id = UUID(dados["id"])
            await session.execute(
                update(ItemUpload)
                .where(ItemUpload.vistoria_local_id == rascunho.local_id)
                .values(vistoria_id_servidor=rascunho.server_id)
            )
            await session.commit()

        result = await session.execute(
            select(AmbienteRascunho)
            .where(
                AmbienteRascunho.vistoria_local_id == rascunho.local_id,
                AmbienteRascunho.server_id.is_(None),
            )
            .order_by(AmbienteRascunho.ordem, AmbienteRascunho.criado_em)
        )
        for ambiente in result.scalars().all():
            dados = await self._remoto.criar_ambiente(
                rascunho.server_id,
                {
                    "nome": ambiente.nome,
                    "ordem": ambiente.ordem,
                    "observacoes": ambiente.observacoes,
                },
                idempotency_key=str(ambiente.local_id),
            )
            ambiente.server_id = UUID(dados["id"])
            await session.execute(
                update(FotoLocal)
                .where(FotoLocal.ambiente_local_id == ambiente.local_id)
                .values(ambiente_id_servidor=ambiente.server_id)
            )
            await session.commit()

    # --- uploads ---

    async def _drenar_uploads(
        self,
        session: AsyncSession,
        resultado: ResultadoDrenagem,
    ) -> None:
        result = await session.execute(
            select(ItemUpload).where(ItemUpload.estado == EstadoSync.PENDING_SYNC)
        )
        itens = list(result.scalars().all())
        if not itens:
            return

        result = await session.execute(
            select(VistoriaRascunho).where(
                VistoriaRascunho.local_id.in_({i.vistoria_local_id for i in itens})
            )
        )
        criacao = {r.local_id: r.criado_em for r in result.scalars().all()}

        # Por vistoria (ordem de criação), fotos antes do laudo
        itens.sort(
            key=lambda i: (
                criacao[i.vistoria_local_id],
                i.tipo != TipoUpload.FOTO,
                i.criado_em,
            )
        )

        for item in itens:
            if item.vistoria_id_servidor is None:
                resultado.ignorados += 1
                continue

            if item.tipo == TipoUpload.FOTO:
                foto = await session.get(FotoLocal, item.foto_local_id)
                if foto.ambiente_local_id is not None and foto.ambiente_id_servidor is None:
                    resultado.ignorados += 1
                    continue
                envio = self._enviar_foto(item, foto)
            else:
                bloqueadoras = await self._fotos_com_erro(session, item.vistoria_local_id)
                if bloqueadoras:
                    await self._laudo_bloqueado(session, item, bloqueadoras)
                    resultado.falhas += 1
                    continue
                if await self._fotos_nao_sincronizadas(session, item.vistoria_local_id):
                    resultado.ignorados += 1
                    continue
                envio = self._enviar_laudo(session, item)

            await self._processar(session, item, resultado, envio)

    async def _fotos_com_erro(
        self,
        session: AsyncSession,
        vistoria_local_id: UUID,
    ) -> list[str]:
        """Arquivos das fotos da vistoria que pararam em erro."""
        result = await session.execute(
            select(ItemUpload.caminho_arquivo).where(
                ItemUpload.vistoria_local_id == vistoria_local_id,
                ItemUpload.tipo == TipoUpload.FOTO,
                ItemUpload.estado == EstadoSync.ERROR,
            )
        )
        return [Path(caminho).name for caminho in result.scalars().all()]

    async def _laudo_bloqueado(
        self,
        session: AsyncSession,
        item: ItemUpload,
        fotos: list[str],
    ) -> None:
        # Sem tentativa: o laudo nem chegou a ser enviado
        item.estado = EstadoSync.ERROR
        item.ultimo_erro = f"Laudo bloqueado por foto(s) com erro: {', '.join(sorted(fotos))}"
        await session.commit()
        logger.warning(
            "Laudo bloqueado por fotos com erro",
            local_id=str(item.local_id),
            fotos=fotos,
        )

    async def _fotos_nao_sincronizadas(
        self,
        session: AsyncSession,
        vistoria_local_id: UUID,
    ) -> int:
        result = await session.execute(
            select(func.count())
            .select_from(ItemUpload)
            .where(
                ItemUpload.vistoria_local_id == vistoria_local_id,
                ItemUpload.tipo == TipoUpload.FOTO,
                ItemUpload.estado != EstadoSync.SYNCED,
            )
        )
        return result.scalar_one()

    async def _enviar_foto(self, item: ItemUpload, foto: FotoLocal) -> None:
        conteudo = await _ler_arquivo(item.caminho_arquivo)
        dados = await self._remoto.enviar_foto(
            item.vistoria_id_servidor,
            conteudo,
            Path(item.caminho_arquivo).name,
            foto.content_type,
            idempotency_key=str(foto.local_id),
            ambiente_id=foto.ambiente_id_servidor,
            legenda=foto.legenda,
            ordem=foto.ordem,
        )
        foto.server_id = UUID(dados["id"])

    async def _enviar_laudo(self, session: AsyncSession, item: ItemUpload) -> None:
        """Envia o PDF (uma vez) e finaliza a vistoria."""
        if item.url_remota is None:
            conteudo = await _ler_arquivo(item.caminho_arquivo)
            dados = await self._remoto.enviar_laudo(
                item.vistoria_id_servidor,
                conteudo,
                Path(item.caminho_arquivo).name,
            )
            item.url_remota = dados["pdf_url"]
            await session.commit()

        await self._remoto.finalizar(item.vistoria_id_servidor, item.url_remota)

    # === MANUTENÇÃO ===

    async def reenviar(self, local_id: UUID) -> ItemDaFila:
        """
        Devolve à fila um item com erro, zerando as tentativas.

        Raises:
            ResourceNotFoundError: id local desconhecido
            BusinessRuleError: item não está em erro
        """
        async with self._armazenamento.sessao() as session:
            item = await session.get(VistoriaRascunho, local_id) or await session.get(
                ItemUpload, local_id
            )
            if item is None:
                raise ResourceNotFoundError("Item da fila", local_id)
            if item.estado != EstadoSync.ERROR:
                raise BusinessRuleError(
                    f"Só itens com erro podem ser reenviados (estado: {item.estado.value})",
                    rule="SYNC_REENVIO",
                )

            item.estado = EstadoSync.PENDING_SYNC
            item.tentativas = 0
            item.ultimo_erro = None
            await session.commit()
            logger.info("Item devolvido à fila", local_id=str(local_id))
            return item

    async def limpar_sincronizados(self) -> int:
        """
        Apaga os arquivos locais de uploads confirmados pelo servidor.

        Returns:
            Quantidade de arquivos removidos
        """
        async with self._armazenamento.sessao() as session:
            result = await session.execute(
                select(ItemUpload).where(ItemUpload.estado == EstadoSync.SYNCED)
            )
            removidos = 0
            for item in result.scalars().all():
                await _apagar_arquivo(item.caminho_arquivo)
                await session.delete(item)
                removidos += 1
            await session.commit()

        logger.info("Arquivos sincronizados removidos", total=removidos)
        return removidos

    async def estatisticas(self) -> EstatisticasFila:
        async with self._armazenamento.sessao() as session:

            async def contar(model, *condicoes) -> int:
                result = await session.execute(
                    select(func.count()).select_from(model).where(*condicoes)
                )
                return result.scalar_one()

            return EstatisticasFila(
                rascunhos_pendentes=await contar(
                    VistoriaRascunho, VistoriaRascunho.estado.in_(PENDENTES)
                ),
                fotos_pendentes=await contar(
                    ItemUpload,
                    ItemUpload.tipo == TipoUpload.FOTO,
                    ItemUpload.estado.in_(PENDENTES),
                ),
                pdfs_pendentes=await contar(
                    ItemUpload,
                    ItemUpload.tipo == TipoUpload.PDF,
                    ItemUpload.estado.in_(PENDENTES),
                ),
                erros=await contar(
                    VistoriaRascunho, VistoriaRascunho.estado == EstadoSync.ERROR
                )
                + await contar(ItemUpload, ItemUpload.estado == EstadoSync.ERROR),
            )

    # === GATILHOS ===

    async def conectividade_restaurada(self) -> ResultadoDrenagem:
        logger.info("Conectividade restaurada, drenando fila")
        return await self.drenar()

    def iniciar_agendamento(self) -> asyncio.Task:
        """Drena a fila periodicamente em background."""
        if self._agendamento is None or self._agendamento.done():
            self._agendamento = asyncio.create_task(self._loop_agendado())
        return self._agendamento

    async def parar_agendamento(self) -> None:
        if self._agendamento is None:
            return
        self._agendamento.cancel()
        with suppress(asyncio.CancelledError):
            await self._agendamento
        self._agendamento = None

    async def _loop_agendado(self) -> None:
        while True:
            await asyncio.sleep(self.intervalo_segundos)
            try:
                await self.drenar()
            except Exception as e:
                # O agendamento continua; o erro fica registrado
                logger.error("Erro na drenagem agendada", error=str(e))
