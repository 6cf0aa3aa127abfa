"""
Workers para processamento em background.

Módulos:
- celery_app: Configuração do Celery
- drive_tasks: Espelhamento de laudos no Google Drive
"""

from grifo.workers.celery_app import celery_app

__all__ = ["celery_app"]
