"""
Ponto de entrada principal da API do Grifo Vistorias.

Este módulo configura a aplicação FastAPI com todas as rotas,
middlewares e handlers de exceção.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grifo.api.v1.router import api_router
from grifo.core.config import settings
from grifo.core.logging import setup_logging
from grifo.core.middleware import RequestContextMiddleware, setup_exception_handlers
from grifo.db.session import engine

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia o ciclo de vida da aplicação."""
    # Startup
    setup_logging()
    logger.info(
        "Iniciando Grifo Vistorias API",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
    )

    yield

    # Shutdown
    await engine.dispose()
    logger.info("Encerrando Grifo Vistorias API")


def create_application() -> FastAPI:
    """Factory para criar a aplicação FastAPI."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Plataforma multi-empresa de vistorias de imóveis",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
    )

    # Erros de domínio no envelope padrão
    setup_exception_handlers(app)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-request-id"],
    )
    app.add_middleware(RequestContextMiddleware)

    # Rotas
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Endpoint de health check para Cloud Run."""
    return {"status": "healthy", "version": settings.VERSION}
