"""
Service de provisionamento de empresas (apenas superadmin).
"""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.autorizacao import ContextoAcesso, garantir_empresa_ativa
from grifo.core.config import settings
from grifo.core.exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from grifo.models.empresa import Empresa
from grifo.repositories.empresa_repository import EmpresaRepository
from grifo.schemas.empresa import EmpresaCreate, EmpresaUpdate, EmpresaUso
from grifo.services.auditoria_service import AuditoriaService

logger = structlog.get_logger()


class EmpresaService:
    """
    Service para operações com Empresa.

    Empresas nunca são removidas: desativar bloqueia todas as operações
    da empresa até a reativação.
    """

    def __init__(self, db: AsyncSession, ctx: ContextoAcesso):
        self._db = db
        self._ctx = ctx
        self._repo = EmpresaRepository(db)
        self._auditoria = AuditoriaService(db)

    async def criar(self, dados: EmpresaCreate) -> Empresa:
        if await self._repo.get_by_cnpj(dados.cnpj):
            raise ResourceAlreadyExistsError("Empresa", "cnpj", dados.cnpj)

        empresa_data = dados.model_dump()
        empresa_data["storage_mb"] = dados.storage_mb or settings.DEFAULT_STORAGE_MB
        empresa = await self._repo.create(ativa=True, **empresa_data)

        logger.info("Empresa criada", empresa_id=str(empresa.id), cnpj=empresa.cnpj)
        await self._auditoria.registrar(
            self._ctx,
            "empresa.criar",
            "empresa",
            empresa.id,
            empresa_id=empresa.id,
            detalhes={"cnpj": empresa.cnpj},
            preservar=(empresa,),
        )
        return empresa

    async def listar(
        self,
        ativa: bool | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[list[Empresa], int]:
        itens = await self._repo.listar(ativa, skip, limit)
        total = await self._repo.count_filtrado(ativa)
        return itens, total

    async def obter(self, empresa_id: UUID) -> Empresa:
        empresa = await self._repo.get_by_id(empresa_id)
        if empresa is None:
            raise ResourceNotFoundError("Empresa", empresa_id)
        return empresa

    async def atualizar(self, empresa_id: UUID, dados: EmpresaUpdate) -> Empresa:
        await self.obter(empresa_id)
        empresa = await self._repo.update(empresa_id, **dados.model_dump(exclude_unset=True))
        await self._auditoria.registrar(
            self._ctx,
            "empresa.atualizar",
            "empresa",
            empresa_id,
            empresa_id=empresa_id,
            detalhes=dados.model_dump(mode="json", exclude_unset=True),
            preservar=(empresa,),
        )
        return empresa

    async def desativar(self, empresa_id: UUID) -> Empresa:
        return await self._alterar_ativa(empresa_id, False)

    async def reativar(self, empresa_id: UUID) -> Empresa:
        return await self._alterar_ativa(empresa_id, True)

    async def _alterar_ativa(self, empresa_id: UUID, ativa: bool) -> Empresa:
        await self.obter(empresa_id)
        empresa = await self._repo.set_ativa(empresa_id, ativa)

        logger.info(
            "Empresa reativada" if ativa else "Empresa desativada",
            empresa_id=str(empresa_id),
        )
        await self._auditoria.registrar(
            self._ctx,
            "empresa.reativar" if ativa else "empresa.desativar",
            "empresa",
            empresa_id,
            empresa_id=empresa_id,
            preservar=(empresa,),
        )
        return empresa

    async def uso(self, empresa_id: UUID) -> EmpresaUso:
        """Cota e contagens de uma empresa ativa."""
        empresa = await garantir_empresa_ativa(self._db, empresa_id)
        contagens = await self._repo.contagens_uso(empresa_id)
        return EmpresaUso(
            empresa_id=empresa.id,
            nome=empresa.nome,
            ativa=empresa.ativa,
            storage_mb=empresa.storage_mb,
            **contagens,
        )
