"""
Testes para vistorias: criação idempotente, ambientes, fotos e finalização.
"""
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.models.auditoria import RegistroAuditoria
from grifo.models.vistoria import Foto, StatusVistoria, Vistoria

PDF_URL = "https://storage.googleapis.com/laudos/laudo-1.pdf"


@pytest.fixture
def vistoria_data(test_imovel) -> dict:
    return {
        "imovel_id": str(test_imovel.id),
        "tipo": "entrada",
        "observacoes": "Chaves com o porteiro",
    }


async def _criar_vistoria(client, headers, dados, status_inicial="em_andamento"):
    response = await client.post(
        "/api/v1/vistorias",
        json={**dados, "status": status_inicial},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.asyncio
async def test_criar_vistoria(client: AsyncClient, test_vistoriador, vistoria_data, auth_headers):
    response = await client.post(
        "/api/v1/vistorias",
        json=vistoria_data,
        headers=auth_headers(test_vistoriador),
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "rascunho"
    assert data["vistoriador_id"] == str(test_vistoriador.id)


@pytest.mark.asyncio
async def test_criar_vistoria_idempotente(
    client: AsyncClient,
    db_session: AsyncSession,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    """A mesma chave enviada duas vezes gera uma única vistoria."""
    headers = {**auth_headers(test_vistoriador), "Idempotency-Key": "rascunho-local-1"}

    primeira = await client.post("/api/v1/vistorias", json=vistoria_data, headers=headers)
    segunda = await client.post("/api/v1/vistorias", json=vistoria_data, headers=headers)

    assert primeira.status_code == 201
    assert segunda.status_code == 200
    assert primeira.json()["data"]["id"] == segunda.json()["data"]["id"]

    total = await db_session.scalar(select(func.count()).select_from(Vistoria))
    assert total == 1


@pytest.mark.asyncio
async def test_chave_no_corpo(client: AsyncClient, test_vistoriador, vistoria_data, auth_headers):
    headers = auth_headers(test_vistoriador)
    dados = {**vistoria_data, "idempotency_key": "chave-corpo"}

    primeira = await client.post("/api/v1/vistorias", json=dados, headers=headers)
    segunda = await client.post("/api/v1/vistorias", json=dados, headers=headers)
    assert primeira.json()["data"]["id"] == segunda.json()["data"]["id"]
    assert segunda.json()["data"]["idempotency_key"] == "chave-corpo"


@pytest.mark.asyncio
async def test_criar_vistoria_imovel_de_outra_empresa(
    client: AsyncClient,
    test_vistoriador,
    auth_headers,
):
    response = await client.post(
        "/api/v1/vistorias",
        json={"imovel_id": "00000000-0000-0000-0000-000000000001", "tipo": "saida"},
        headers=auth_headers(test_vistoriador),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_criar_vistoria_ja_finalizada_e_invalido(
    client: AsyncClient,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    response = await client.post(
        "/api/v1/vistorias",
        json={**vistoria_data, "status": "finalizada"},
        headers=auth_headers(test_vistoriador),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_vistoriador_nao_atribui_a_outro(
    client: AsyncClient,
    test_vistoriador,
    test_admin,
    vistoria_data,
    auth_headers,
):
    response = await client.post(
        "/api/v1/vistorias",
        json={**vistoria_data, "vistoriador_id": str(test_admin.id)},
        headers=auth_headers(test_vistoriador),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_atribui_vistoriador(
    client: AsyncClient,
    test_admin,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    response = await client.post(
        "/api/v1/vistorias",
        json={**vistoria_data, "vistoriador_id": str(test_vistoriador.id)},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 201
    assert response.json()["data"]["vistoriador_id"] == str(test_vistoriador.id)


@pytest.mark.asyncio
async def test_vistoriador_lista_apenas_as_proprias(
    client: AsyncClient,
    test_admin,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    await _criar_vistoria(client, auth_headers(test_admin), vistoria_data)
    await _criar_vistoria(client, auth_headers(test_vistoriador), vistoria_data)

    response = await client.get("/api/v1/vistorias", headers=auth_headers(test_vistoriador))
    data = response.json()
    assert data["total"] == 1
    assert data["data"][0]["vistoriador_id"] == str(test_vistoriador.id)

    todas = await client.get("/api/v1/vistorias", headers=auth_headers(test_admin))
    assert todas.json()["total"] == 2


@pytest.mark.asyncio
async def test_alterar_status_manual(client: AsyncClient, test_vistoriador, vistoria_data, auth_headers):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data, "rascunho")

    response = await client.patch(
        f"/api/v1/vistorias/{vistoria['id']}/status",
        json={"status": "em_andamento"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "em_andamento"

    # Finalização só pela operação própria
    response = await client.patch(
        f"/api/v1/vistorias/{vistoria['id']}/status",
        json={"status": "finalizada"},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"


@pytest.mark.asyncio
async def test_finalizar_vistoria(
    client: AsyncClient,
    db_session: AsyncSession,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data)

    response = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/finalizar",
        json={"pdf_url": PDF_URL},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["ja_finalizada"] is False
    assert data["vistoria"]["status"] == "finalizada"
    assert data["vistoria"]["pdf_url"] == PDF_URL
    assert data["vistoria"]["data_finalizacao"] is not None

    registros = await db_session.scalar(
        select(func.count())
        .select_from(RegistroAuditoria)
        .where(RegistroAuditoria.acao == "vistoria.finalizar")
    )
    assert registros == 1


@pytest.mark.asyncio
async def test_finalizar_duas_vezes_nao_altera(
    client: AsyncClient,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    """Segunda finalização é sucesso e mantém pdf_url e data originais."""
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data)
    url = f"/api/v1/vistorias/{vistoria['id']}/finalizar"

    primeira = (await client.post(url, json={"pdf_url": PDF_URL}, headers=headers)).json()["data"]
    segunda = await client.post(url, json={"pdf_url": "https://outro/laudo.pdf"}, headers=headers)

    assert segunda.status_code == 200
    data = segunda.json()["data"]
    assert data["ja_finalizada"] is True
    assert data["vistoria"]["pdf_url"] == PDF_URL
    assert data["vistoria"]["data_finalizacao"] == primeira["vistoria"]["data_finalizacao"]


@pytest.mark.asyncio
async def test_finalizar_rascunho_e_invalido(
    client: AsyncClient,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data, "rascunho")

    response = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/finalizar",
        json={"pdf_url": PDF_URL},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"


@pytest.mark.asyncio
async def test_finalizar_contestada_e_invalido(
    client: AsyncClient,
    db_session: AsyncSession,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data)

    registro = await db_session.get(Vistoria, UUID(vistoria["id"]))
    registro.status = StatusVistoria.CONTESTADA
    await db_session.commit()

    response = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/finalizar",
        json={"pdf_url": PDF_URL},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"


@pytest.mark.asyncio
async def test_finalizar_vistoria_de_outro_vistoriador(
    client: AsyncClient,
    db_session: AsyncSession,
    test_admin,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    vistoria = await _criar_vistoria(client, auth_headers(test_admin), vistoria_data)

    response = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/finalizar",
        json={"pdf_url": PDF_URL},
        headers=auth_headers(test_vistoriador),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_ambiente_e_foto(
    client: AsyncClient,
    db_session: AsyncSession,
    test_vistoriador,
    vistoria_data,
    storage,
    auth_headers,
):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data)

    ambiente = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/ambientes",
        json={"nome": "Sala", "ordem": 1, "idempotency_key": "amb-1"},
        headers=headers,
    )
    assert ambiente.status_code == 201
    ambiente_id = ambiente.json()["data"]["id"]

    envio = {
        "data": {"ambiente_id": ambiente_id, "legenda": "Parede norte", "idempotency_key": "foto-1"},
        "files": {"file": ("sala.jpg", b"\xff\xd8\xff jpeg", "image/jpeg")},
        "headers": headers,
    }
    primeira = await client.post(f"/api/v1/vistorias/{vistoria['id']}/fotos", **envio)
    segunda = await client.post(f"/api/v1/vistorias/{vistoria['id']}/fotos", **envio)

    assert primeira.status_code == 201
    assert segunda.status_code == 200
    foto = primeira.json()["data"]
    assert foto["ambiente_id"] == ambiente_id
    assert foto["storage_path"].startswith(f"{vistoria['empresa_id']}/{vistoria['id']}/fotos/")

    # Reenvio com a mesma chave não sobe o arquivo de novo
    assert len(storage.arquivos) == 1
    total = await db_session.scalar(select(func.count()).select_from(Foto))
    assert total == 1

    fotos = await client.get(f"/api/v1/vistorias/{vistoria['id']}/fotos", headers=headers)
    assert len(fotos.json()["data"]) == 1


@pytest.mark.asyncio
async def test_foto_com_tipo_invalido(
    client: AsyncClient,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data)

    response = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/fotos",
        files={"file": ("doc.txt", b"texto", "text/plain")},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE_TYPE"


@pytest.mark.asyncio
async def test_foto_em_vistoria_finalizada(
    client: AsyncClient,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data)
    await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/finalizar",
        json={"pdf_url": PDF_URL},
        headers=headers,
    )

    response = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/fotos",
        files={"file": ("sala.jpg", b"\xff\xd8", "image/jpeg")},
        headers=headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_enviar_laudo_e_finalizar(
    client: AsyncClient,
    test_vistoriador,
    vistoria_data,
    auth_headers,
):
    headers = auth_headers(test_vistoriador)
    vistoria = await _criar_vistoria(client, headers, vistoria_data)

    laudo = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/laudo",
        files={"file": ("laudo.pdf", b"%PDF-1.4", "application/pdf")},
        headers=headers,
    )
    assert laudo.status_code == 201
    pdf_url = laudo.json()["data"]["pdf_url"]
    assert "/relatorios/" in pdf_url

    response = await client.post(
        f"/api/v1/vistorias/{vistoria['id']}/finalizar",
        json={"pdf_url": pdf_url},
        headers=headers,
    )
    assert response.json()["data"]["vistoria"]["pdf_url"] == pdf_url
