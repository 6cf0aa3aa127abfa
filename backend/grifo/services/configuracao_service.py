"""
Service de configurações da empresa.
"""

import structlog

from grifo.core.autorizacao import garantir_empresa_ativa
from grifo.repositories.empresa_repository import EmpresaRepository
from grifo.schemas.empresa import ConfiguracoesEmpresa, ConfiguracoesUpdate
from grifo.services.auditoria_service import AuditoriaService
from grifo.services.base import TenantService

logger = structlog.get_logger()


class ConfiguracaoService(TenantService):
    """Leitura e atualização parcial das configurações da empresa alvo."""

    async def obter(self) -> ConfiguracoesEmpresa:
        empresa = await garantir_empresa_ativa(self._db, self._exigir_empresa())
        return ConfiguracoesEmpresa.da_empresa(empresa)

    async def atualizar(self, dados: ConfiguracoesUpdate) -> ConfiguracoesEmpresa:
        """
        Mescla os campos enviados sobre as configurações atuais.

        Campos omitidos em uma seção mantêm o valor gravado.
        """
        empresa_id = self._exigir_empresa()
        empresa = await garantir_empresa_ativa(self._db, empresa_id)

        atuais = ConfiguracoesEmpresa.da_empresa(empresa).model_dump(mode="json")
        alteracoes = dados.model_dump(mode="json", exclude_unset=True)
        for secao, valores in alteracoes.items():
            if valores is not None:
                atuais[secao].update(valores)
        novas = ConfiguracoesEmpresa.model_validate(atuais)

        empresa = await EmpresaRepository(self._db).update(
            empresa_id, configuracoes=novas.model_dump(mode="json")
        )
        logger.info(
            "Configurações da empresa atualizadas",
            empresa_id=str(empresa_id),
            secoes=sorted(alteracoes),
        )
        await AuditoriaService(self._db).registrar(
            self._ctx,
            "empresa.configuracoes",
            "empresa",
            empresa_id,
            empresa_id=empresa_id,
            detalhes=alteracoes,
            preservar=(empresa,),
        )
        return novas
