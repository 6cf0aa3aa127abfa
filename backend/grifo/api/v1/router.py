"""
Router principal da API v1.

Agrega todas as rotas organizadas por domínio.
"""

from fastapi import APIRouter

from grifo.api.v1.endpoints import (
    auth,
    clientes,
    configuracoes,
    dashboard,
    empresas,
    health,
    imoveis,
    notificacoes,
    public,
    relatorios,
    solicitacoes,
    usuarios,
    vistorias,
)

api_router = APIRouter()

# Health check
api_router.include_router(health.router, prefix="/health", tags=["Health"])

# Autenticação
api_router.include_router(auth.router)

# Administração da plataforma
api_router.include_router(empresas.router)
api_router.include_router(usuarios.router)
api_router.include_router(configuracoes.router)

# Imóveis e Vistorias
api_router.include_router(imoveis.router)
api_router.include_router(vistorias.router)

# Clientes e Solicitações
api_router.include_router(clientes.router)
api_router.include_router(solicitacoes.router)

# Notificações, Dashboard e Relatórios
api_router.include_router(notificacoes.router)
api_router.include_router(dashboard.router)
api_router.include_router(relatorios.router)

# Área pública
api_router.include_router(public.router)
