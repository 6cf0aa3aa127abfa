"""
Tasks de espelhamento de laudos no Google Drive.

Disparadas depois da finalização. Falhas aqui nunca afetam a vistoria
já finalizada; a task apenas tenta de novo.
"""

import asyncio
from uuid import UUID

import structlog
from celery import shared_task
from kombu.exceptions import OperationalError

from grifo.core.config import settings
from grifo.core.exceptions import UpstreamUnavailableError
from grifo.db.session import async_session_maker
from grifo.integrations.google_drive import GoogleDriveClient
from grifo.repositories.empresa_repository import EmpresaRepository
from grifo.repositories.vistoria_repository import VistoriaRepository

logger = structlog.get_logger()


async def espelhar_laudo(
    vistoria_id: UUID,
    empresa_id: UUID,
    client: GoogleDriveClient | None = None,
) -> str | None:
    """
    Copia o laudo finalizado para o Drive e grava ``drive_url``.

    Returns:
        URL no Drive, ou None se não houver o que espelhar
    """
    client = client or GoogleDriveClient()
    if not client.habilitado:
        logger.info("Google Drive não configurado, espelhamento ignorado")
        return None

    async with async_session_maker() as session:
        repo = VistoriaRepository(session, empresa_id)
        vistoria = await repo.get_by_id(vistoria_id)
        empresa = await EmpresaRepository(session).get_by_id(empresa_id)
        if vistoria is None or empresa is None or not vistoria.pdf_url:
            logger.warning("Vistoria sem laudo para espelhar", vistoria_id=str(vistoria_id))
            return None

        conteudo = await client.baixar(vistoria.pdf_url)
        drive_url = await client.upload_pdf(
            f"{empresa.nome}_{vistoria.id}.pdf",
            conteudo,
            empresa.nome,
        )
        await repo.set_drive_url(vistoria.id, drive_url)
        return drive_url


@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def espelhar_laudo_task(self, vistoria_id: str, empresa_id: str):
    """Task Celery que espelha o laudo no Drive."""
    try:
        drive_url = asyncio.run(espelhar_laudo(UUID(vistoria_id), UUID(empresa_id)))
    except UpstreamUnavailableError as e:
        logger.error(
            "Erro ao espelhar laudo",
            vistoria_id=vistoria_id,
            error=e.message,
            task_id=self.request.id,
        )
        raise self.retry(exc=e)

    return {"vistoria_id": vistoria_id, "drive_url": drive_url}


def agendar_espelhamento(vistoria_id: UUID, empresa_id: UUID) -> bool:
    """
    Enfileira o espelhamento (best-effort).

    Returns:
        True se a task foi enfileirada
    """
    if not settings.drive_habilitado:
        return False
    try:
        espelhar_laudo_task.delay(str(vistoria_id), str(empresa_id))
    except OperationalError as e:
        logger.warning(
            "Não foi possível enfileirar espelhamento no Drive",
            vistoria_id=str(vistoria_id),
            error=str(e),
        )
        return False
    return True
