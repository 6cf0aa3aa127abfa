"""
Endpoints de Configurações da empresa.

Superadmin informa a empresa via ``?empresa_id=``.
"""

from fastapi import APIRouter

from grifo.core.dependencies import AcessoAdmin, DBSession
from grifo.schemas.base import APIResponse
from grifo.schemas.empresa import ConfiguracoesEmpresa, ConfiguracoesUpdate
from grifo.services.configuracao_service import ConfiguracaoService

router = APIRouter(prefix="/configuracoes", tags=["Configurações"])


@router.get("", response_model=APIResponse[ConfiguracoesEmpresa])
async def obter_configuracoes(
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[ConfiguracoesEmpresa]:
    return APIResponse(success=True, data=await ConfiguracaoService(db, ctx).obter())


@router.patch("", response_model=APIResponse[ConfiguracoesEmpresa])
async def atualizar_configuracoes(
    dados: ConfiguracoesUpdate,
    db: DBSession,
    ctx: AcessoAdmin,
) -> APIResponse[ConfiguracoesEmpresa]:
    configuracoes = await ConfiguracaoService(db, ctx).atualizar(dados)
    return APIResponse(
        success=True,
        data=configuracoes,
        message="Configurações atualizadas",
    )
