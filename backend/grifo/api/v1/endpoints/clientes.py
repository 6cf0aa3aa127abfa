"""
Endpoints de Clientes.

Consulta dos clientes cadastrados pela área pública.
"""

from fastapi import APIRouter, Query

from grifo.core.dependencies import AcessoAdmin, DBSession
from grifo.schemas.base import PaginatedResponse
from grifo.schemas.cliente import ClienteResponse
from grifo.services.cliente_service import SolicitacaoService

router = APIRouter(prefix="/clientes", tags=["Clientes"])


@router.get("", response_model=PaginatedResponse[ClienteResponse])
async def listar_clientes(
    db: DBSession,
    ctx: AcessoAdmin,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[ClienteResponse]:
    """Lista clientes da empresa com paginação."""
    clientes, total = await SolicitacaoService(db, ctx).listar_clientes(skip, limit)
    return PaginatedResponse(
        success=True,
        data=[ClienteResponse.model_validate(c) for c in clientes],
        total=total,
        page=skip // limit + 1,
        page_size=limit,
    )
