"""
Testes para o endpoint de clientes.
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_clientes_empty(client: AsyncClient, test_admin, auth_headers):
    """Testa listagem de clientes vazia."""
    response = await client.get("/api/v1/clientes", headers=auth_headers(test_admin))
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["data"] == []
    assert data["total"] == 0


@pytest.mark.asyncio
async def test_cliente_cadastrado_aparece_para_admin(
    client: AsyncClient, test_admin, test_empresa, auth_headers
):
    cadastro = await client.post(
        "/api/v1/public/clientes",
        json={
            "empresa_id": str(test_empresa.id),
            "nome": "João da Silva",
            "email": "joao@email.com",
            "telefone": "41999999999",
        },
    )
    assert cadastro.status_code == 201

    response = await client.get("/api/v1/clientes", headers=auth_headers(test_admin))
    data = response.json()
    assert data["total"] == 1
    assert data["data"][0]["nome"] == "João da Silva"


@pytest.mark.asyncio
async def test_clientes_isolados_por_empresa(
    client: AsyncClient, test_cliente, outro_admin, auth_headers
):
    response = await client.get("/api/v1/clientes", headers=auth_headers(outro_admin))
    assert response.status_code == 200
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_vistoriador_nao_lista_clientes(
    client: AsyncClient, test_cliente, test_vistoriador, auth_headers
):
    response = await client.get("/api/v1/clientes", headers=auth_headers(test_vistoriador))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_paginacao_clientes(client: AsyncClient, test_cliente, test_admin, auth_headers):
    response = await client.get(
        "/api/v1/clientes?skip=0&limit=1", headers=auth_headers(test_admin)
    )
    data = response.json()
    assert data["page"] == 1
    assert data["page_size"] == 1
    assert len(data["data"]) == 1
