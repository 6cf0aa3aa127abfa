"""
Testes para a administração de empresas (superadmin).
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.models.auditoria import RegistroAuditoria

EMPRESA = {
    "nome": "Nova Vistoriadora",
    "cnpj": "11.222.333/0001-44",
    "email": "contato@nova.com",
}


@pytest.mark.asyncio
async def test_criar_empresa(client: AsyncClient, db_session: AsyncSession, test_superadmin, auth_headers):
    response = await client.post(
        "/api/v1/empresas",
        json=EMPRESA,
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["data"]["ativa"] is True
    assert data["data"]["storage_mb"] == 1000

    registros = (
        await db_session.execute(
            select(RegistroAuditoria).where(RegistroAuditoria.acao == "empresa.criar")
        )
    ).scalars().all()
    assert len(registros) == 1
    assert registros[0].usuario_id == test_superadmin.id


@pytest.mark.asyncio
async def test_criar_empresa_cnpj_duplicado(client: AsyncClient, test_superadmin, auth_headers):
    headers = auth_headers(test_superadmin)
    await client.post("/api/v1/empresas", json=EMPRESA, headers=headers)

    response = await client.post("/api/v1/empresas", json=EMPRESA, headers=headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_criar_empresa_cnpj_invalido(client: AsyncClient, test_superadmin, auth_headers):
    response = await client.post(
        "/api/v1/empresas",
        json={**EMPRESA, "cnpj": "123"},
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_admin_nao_administra_empresas(client: AsyncClient, test_admin, auth_headers):
    response = await client.post(
        "/api/v1/empresas",
        json=EMPRESA,
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_desativar_e_reativar(
    client: AsyncClient,
    test_superadmin,
    test_admin,
    test_empresa,
    auth_headers,
):
    headers = auth_headers(test_superadmin)

    response = await client.post(f"/api/v1/empresas/{test_empresa.id}/desativar", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["ativa"] is False

    # Usuários da empresa ficam bloqueados
    bloqueado = await client.get("/api/v1/imoveis", headers=auth_headers(test_admin))
    assert bloqueado.status_code == 400
    assert bloqueado.json()["error"]["code"] == "TENANT_INACTIVE"

    # Empresa inativa continua visível para o superadmin
    response = await client.get(f"/api/v1/empresas/{test_empresa.id}", headers=headers)
    assert response.status_code == 200

    response = await client.post(f"/api/v1/empresas/{test_empresa.id}/reativar", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["ativa"] is True

    liberado = await client.get("/api/v1/imoveis", headers=auth_headers(test_admin))
    assert liberado.status_code == 200


@pytest.mark.asyncio
async def test_listar_empresas_por_situacao(
    client: AsyncClient,
    db_session: AsyncSession,
    test_superadmin,
    test_empresa,
    outra_empresa,
    auth_headers,
):
    outra_empresa.ativa = False
    await db_session.commit()

    response = await client.get(
        "/api/v1/empresas",
        params={"ativa": "false"},
        headers=auth_headers(test_superadmin),
    )
    data = response.json()
    assert data["total"] == 1
    assert data["data"][0]["id"] == str(outra_empresa.id)


@pytest.mark.asyncio
async def test_uso_da_empresa(
    client: AsyncClient,
    test_superadmin,
    test_admin,
    test_vistoriador,
    test_imovel,
    test_empresa,
    auth_headers,
):
    response = await client.get(
        f"/api/v1/empresas/{test_empresa.id}/uso",
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 200
    uso = response.json()["data"]
    assert uso["total_usuarios"] == 2
    assert uso["total_imoveis"] == 1
    assert uso["total_vistorias"] == 0
    assert uso["storage_mb"] == 1000


@pytest.mark.asyncio
async def test_uso_de_empresa_inexistente(client: AsyncClient, test_superadmin, auth_headers):
    response = await client.get(
        "/api/v1/empresas/00000000-0000-0000-0000-000000000000/uso",
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 404
