"""
Armazenamento local durável da fila (SQLite via aiosqlite).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from grifo.sync.models import SyncBase

logger = structlog.get_logger()


class ArmazenamentoLocal:
    """
    Banco local do aparelho.

    Uso:
        armazenamento = ArmazenamentoLocal.em_arquivo("/data/grifo.db")
        await armazenamento.inicializar()
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_maker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def em_arquivo(cls, caminho: str) -> "ArmazenamentoLocal":
        return cls(create_async_engine(f"sqlite+aiosqlite:///{caminho}"))

    @classmethod
    def em_memoria(cls) -> "ArmazenamentoLocal":
        """Banco volátil (testes); uma conexão compartilhada."""
        return cls(
            create_async_engine(
                "sqlite+aiosqlite:///:memory:",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        )

    async def inicializar(self) -> None:
        """Cria as tabelas locais se ainda não existirem."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SyncBase.metadata.create_all)
        logger.info("Armazenamento local inicializado", url=str(self.engine.url))

    @asynccontextmanager
    async def sessao(self) -> AsyncIterator[AsyncSession]:
        async with self._session_maker() as session:
            yield session

    async def fechar(self) -> None:
        await self.engine.dispose()
