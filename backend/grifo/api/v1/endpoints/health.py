"""
Health check endpoints.
"""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from grifo.core.config import settings
from grifo.core.dependencies import DBSession

router = APIRouter()
logger = structlog.get_logger()


@router.get("")
async def health_check() -> dict:
    """Health check básico."""
    return {
        "status": "healthy",
        "version": settings.VERSION,
    }


@router.get("/ready")
async def readiness_check(db: DBSession):
    """
    Readiness check para Kubernetes/Cloud Run.

    Verifica se a aplicação está pronta para receber tráfego.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Banco indisponível no readiness check", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "checks": {"database": "error"}},
        )

    return {
        "status": "ready",
        "checks": {
            "database": "ok",
            "drive": "enabled" if settings.drive_habilitado else "disabled",
        },
    }
