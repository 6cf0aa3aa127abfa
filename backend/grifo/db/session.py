"""
Engine e fábrica de sessões assíncronas do banco da API.

Em produção (Cloud Run) cada instância abre conexões sob demanda, sem
pool próprio. Fora dela o pool segue DATABASE_POOL_SIZE e
DATABASE_MAX_OVERFLOW.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from grifo.core.config import settings


def _opcoes_engine() -> dict[str, Any]:
    if settings.ENVIRONMENT == "production":
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    str(settings.DATABASE_URL),
    echo=settings.DEBUG,
    **_opcoes_engine(),
)

# expire_on_commit=False: objetos continuam legíveis após o commit do repositório
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)
