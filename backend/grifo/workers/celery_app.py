"""
Aplicação Celery dos workers do Grifo.

Hoje só executa o espelhamento de laudos no Google Drive; o broker e o
backend de resultados são Redis.

Execução local:
    celery -A grifo.workers.celery_app worker --loglevel=info
"""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from grifo.core.config import settings
from grifo.core.logging import setup_logging

celery_app = Celery(
    "grifo-vistorias",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["grifo.workers.drive_tasks"],
)

celery_app.conf.update(
    timezone="America/Sao_Paulo",
    enable_utc=True,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Upload para o Drive é lento; o limite cobre download + upload
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    result_expires=60 * 60 * 24,
    # Sem broker a API segue; o envio falha rápido
    broker_connection_timeout=3,
    task_publish_retry=False,
)


@celery_setup_logging.connect
def _configurar_logging(**kwargs) -> None:
    """Worker usa o mesmo structlog da API em vez do logging do Celery."""
    setup_logging()
