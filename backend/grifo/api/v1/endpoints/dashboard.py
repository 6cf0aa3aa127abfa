"""
Endpoints do Dashboard.
"""

from fastapi import APIRouter

from grifo.core.dependencies import AcessoAdmin, DBSession
from grifo.schemas.base import APIResponse
from grifo.schemas.dashboard import DashboardStats
from grifo.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=APIResponse[DashboardStats])
async def obter_dashboard(
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[DashboardStats]:
    """
    Indicadores da empresa.

    Superadmin informa a empresa via ``?empresa_id=``.
    """
    return APIResponse(success=True, data=await DashboardService(db, ctx).estatisticas())
