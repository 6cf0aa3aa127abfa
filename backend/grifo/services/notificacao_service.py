"""
Service de Notificações.

Notificações são efeito colateral de transições de estado. O fan-out
roda depois do commit da operação principal e qualquer falha é apenas
registrada em log: nunca desfaz nem derruba a operação que a disparou.
"""

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import ResourceNotFoundError
from grifo.db.base import Base
from grifo.models.cliente import Cliente, SolicitacaoVistoria, StatusSolicitacao
from grifo.models.notificacao import Notificacao, TipoDestinatario, TipoNotificacao
from grifo.models.vistoria import StatusVistoria, Vistoria
from grifo.repositories.notificacao_repository import NotificacaoRepository
from grifo.repositories.usuario_repository import UsuarioRepository
from grifo.schemas.notificacao import (
    LaudoDisponivelMeta,
    MetadadosNotificacao,
    SolicitacaoCriadaMeta,
    SolicitacaoDecididaMeta,
    StatusAlteradoMeta,
    VistoriaAgendadaMeta,
)
from grifo.services.base import descartar_transacao

logger = structlog.get_logger()

Destinatario = tuple[TipoDestinatario, UUID]

TIPO_DECISAO = {
    StatusSolicitacao.APROVADA: "inspection_request_approved",
    StatusSolicitacao.REJEITADA: "inspection_request_rejected",
    StatusSolicitacao.ALTERACOES_SOLICITADAS: "inspection_request_changes_requested",
}

TITULO_DECISAO = {
    StatusSolicitacao.APROVADA: "Solicitação aprovada",
    StatusSolicitacao.REJEITADA: "Solicitação rejeitada",
    StatusSolicitacao.ALTERACOES_SOLICITADAS: "Alterações solicitadas",
}

ROTULO_STATUS = {
    StatusVistoria.RASCUNHO: "rascunho",
    StatusVistoria.EM_ANDAMENTO: "em andamento",
    StatusVistoria.FINALIZADA: "finalizada",
    StatusVistoria.CONTESTADA: "contestada",
}


class NotificacaoService:
    """
    Service de notificações de uma empresa.

    Os métodos de fan-out devolvem as notificações criadas (lista vazia
    em caso de falha ou sem destinatários).
    """

    def __init__(self, db: AsyncSession, empresa_id: UUID | None):
        self._db = db
        self._empresa_id = empresa_id
        self._repo = NotificacaoRepository(db, empresa_id)

    # === FAN-OUT ===

    async def _emitir(
        self,
        empresa_id: UUID,
        destinatarios: list[Destinatario],
        metadados: MetadadosNotificacao,
        titulo: str,
        mensagem: str,
        preservar: tuple[Base, ...] = (),
    ) -> list[Notificacao]:
        if not destinatarios:
            return []

        try:
            notificacoes = [
                Notificacao(
                    empresa_id=empresa_id,
                    recipient_type=recipient_type,
                    recipient_id=recipient_id,
                    tipo=TipoNotificacao(metadados.tipo),
                    titulo=titulo,
                    mensagem=mensagem,
                    lida=False,
                    metadados=metadados.model_dump(mode="json"),
                )
                for recipient_type, recipient_id in destinatarios
            ]
            await self._repo.criar_varias(notificacoes)
        except Exception as e:
            await descartar_transacao(self._db, *preservar)
            logger.error(
                "Falha no fan-out de notificações",
                tipo=metadados.tipo,
                destinatarios=len(destinatarios),
                error=str(e),
            )
            return []

        logger.info(
            "Notificações criadas",
            tipo=metadados.tipo,
            destinatarios=len(notificacoes),
        )
        return notificacoes

    async def solicitacao_criada(
        self,
        solicitacao: SolicitacaoVistoria,
        cliente: Cliente,
    ) -> list[Notificacao]:
        """Avisa todos os administradores da empresa."""
        try:
            admins = await UsuarioRepository(self._db).get_admins(solicitacao.empresa_id)
        except Exception as e:
            logger.error("Falha ao buscar administradores", error=str(e))
            await descartar_transacao(self._db, solicitacao, cliente)
            return []

        return await self._emitir(
            solicitacao.empresa_id,
            [(TipoDestinatario.ADMIN, admin.id) for admin in admins],
            SolicitacaoCriadaMeta(
                solicitacao_id=solicitacao.id,
                cliente_id=cliente.id,
                cliente_nome=cliente.nome,
            ),
            titulo="Nova solicitação de vistoria",
            mensagem=f"{cliente.nome} solicitou uma vistoria em {solicitacao.endereco_imovel}",
            preservar=(solicitacao, cliente),
        )

    async def solicitacao_decidida(
        self,
        solicitacao: SolicitacaoVistoria,
    ) -> list[Notificacao]:
        tipo = TIPO_DECISAO.get(solicitacao.status)
        if tipo is None:
            return []

        mensagem = f"Sua solicitação para {solicitacao.endereco_imovel} foi atualizada"
        if solicitacao.comentario_decisao:
            mensagem += f": {solicitacao.comentario_decisao}"

        return await self._emitir(
            solicitacao.empresa_id,
            [(TipoDestinatario.CLIENTE, solicitacao.cliente_id)],
            SolicitacaoDecididaMeta(
                tipo=tipo,
                solicitacao_id=solicitacao.id,
                comentario=solicitacao.comentario_decisao,
            ),
            titulo=TITULO_DECISAO[solicitacao.status],
            mensagem=mensagem,
            preservar=(solicitacao,),
        )

    async def vistoria_agendada(
        self,
        vistoria: Vistoria,
        data_agendada: datetime,
    ) -> list[Notificacao]:
        if vistoria.cliente_id is None:
            return []

        return await self._emitir(
            vistoria.empresa_id,
            [(TipoDestinatario.CLIENTE, vistoria.cliente_id)],
            VistoriaAgendadaMeta(vistoria_id=vistoria.id, data_agendada=data_agendada),
            titulo="Vistoria agendada",
            mensagem=f"Sua vistoria foi agendada para {data_agendada:%d/%m/%Y %H:%M}",
            preservar=(vistoria,),
        )

    async def status_alterado(
        self,
        vistoria: Vistoria,
        status_anterior: StatusVistoria,
    ) -> list[Notificacao]:
        if vistoria.cliente_id is None or vistoria.status == status_anterior:
            return []

        return await self._emitir(
            vistoria.empresa_id,
            [(TipoDestinatario.CLIENTE, vistoria.cliente_id)],
            StatusAlteradoMeta(
                vistoria_id=vistoria.id,
                status_anterior=status_anterior,
                status_novo=vistoria.status,
            ),
            titulo="Status da vistoria atualizado",
            mensagem=f"Sua vistoria agora está {ROTULO_STATUS[vistoria.status]}",
            preservar=(vistoria,),
        )

    async def laudo_disponivel(self, vistoria: Vistoria) -> list[Notificacao]:
        if vistoria.cliente_id is None or not vistoria.pdf_url:
            return []

        return await self._emitir(
            vistoria.empresa_id,
            [(TipoDestinatario.CLIENTE, vistoria.cliente_id)],
            LaudoDisponivelMeta(vistoria_id=vistoria.id, pdf_url=vistoria.pdf_url),
            titulo="Laudo disponível",
            mensagem="O laudo da sua vistoria já está disponível",
            preservar=(vistoria,),
        )

    # === CAIXA DE ENTRADA ===

    async def listar(
        self,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
        apenas_nao_lidas: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Notificacao], int]:
        return await self._repo.listar_do_destinatario(
            recipient_type, recipient_id, apenas_nao_lidas, skip, limit
        )

    async def contar_nao_lidas(
        self,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
    ) -> int:
        return await self._repo.count_nao_lidas(recipient_type, recipient_id)

    async def marcar_como_lida(
        self,
        notificacao_id: UUID,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
    ) -> Notificacao:
        notificacao = await self._repo.marcar_como_lida(
            notificacao_id, recipient_type, recipient_id
        )
        if notificacao is None:
            raise ResourceNotFoundError("Notificação", notificacao_id)
        return notificacao

    async def marcar_todas_como_lidas(
        self,
        recipient_type: TipoDestinatario,
        recipient_id: UUID,
    ) -> int:
        return await self._repo.marcar_todas_como_lidas(recipient_type, recipient_id)
