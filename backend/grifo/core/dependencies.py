"""
Dependências injetáveis do FastAPI.

Define dependências reutilizáveis para autenticação, database session,
e serviços compartilhados.
"""

from typing import Annotated, AsyncGenerator
from uuid import UUID

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso, contexto_da_requisicao
from grifo.core.firebase_auth import IdentityProvider, firebase_auth_service
from grifo.core.storage import StorageService, storage_service
from grifo.db.session import async_session_maker
from grifo.models.usuario import UserRole

security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency que fornece uma sessão de banco de dados.

    Uso:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


def get_identity_provider() -> IdentityProvider:
    """Provedor de identidade (substituído nos testes)."""
    return firebase_auth_service


def require_access(
    *papeis: UserRole,
    permitir_inativa: bool = False,
    empresa_alvo: bool = True,
):
    """
    Factory de dependency que passa a requisição pelo gate.

    O parâmetro de query ``empresa_id`` é a empresa alvo explícita;
    sem ele vale a empresa do usuário. Rotas que já recebem a empresa
    no path (administração de empresas) usam ``empresa_alvo=False``.

    Uso:
        @router.get("")
        async def listar(ctx: Annotated[ContextoAcesso, Depends(require_access(UserRole.ADMIN))]):
            ...
    """

    async def access_checker(
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
        db: Annotated[AsyncSession, Depends(get_db)],
        identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
        empresa_id: Annotated[
            UUID | None,
            Query(description="Empresa alvo (apenas superadmin pode informar outra)"),
        ] = None,
    ) -> ContextoAcesso:
        return await contexto_da_requisicao(
            credentials.credentials if credentials else None,
            db,
            identity_provider,
            papeis=papeis,
            empresa_id=empresa_id,
            permitir_inativa=permitir_inativa,
        )

    async def access_checker_sem_alvo(
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
        db: Annotated[AsyncSession, Depends(get_db)],
        identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    ) -> ContextoAcesso:
        return await contexto_da_requisicao(
            credentials.credentials if credentials else None,
            db,
            identity_provider,
            papeis=papeis,
            permitir_inativa=permitir_inativa,
        )

    return access_checker if empresa_alvo else access_checker_sem_alvo


# Type aliases para facilitar uso nas rotas
DBSession = Annotated[AsyncSession, Depends(get_db)]
IdentityProviderDep = Annotated[IdentityProvider, Depends(get_identity_provider)]

# Qualquer papel autenticado
Autenticado = Annotated[ContextoAcesso, Depends(require_access())]

# Role-based dependencies
AcessoLeitura = Annotated[
    ContextoAcesso,
    Depends(
        require_access(
            UserRole.SUPERADMIN, UserRole.ADMIN, UserRole.VISTORIADOR, UserRole.CORRETOR
        )
    ),
]
AcessoVistoriador = Annotated[
    ContextoAcesso,
    Depends(require_access(UserRole.SUPERADMIN, UserRole.ADMIN, UserRole.VISTORIADOR)),
]
AcessoAdmin = Annotated[
    ContextoAcesso,
    Depends(require_access(UserRole.SUPERADMIN, UserRole.ADMIN)),
]
# Administração de empresas: também sobre empresas inativas
AcessoSuperadmin = Annotated[
    ContextoAcesso,
    Depends(
        require_access(UserRole.SUPERADMIN, permitir_inativa=True, empresa_alvo=False)
    ),
]


def get_storage() -> StorageService:
    """Storage de arquivos (substituído nos testes)."""
    return storage_service


StorageDep = Annotated[StorageService, Depends(get_storage)]
