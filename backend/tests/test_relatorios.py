"""
Testes dos relatórios de vistorias e solicitações.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.db.base import utcnow
from grifo.models.cliente import SolicitacaoVistoria, StatusSolicitacao, UrgenciaSolicitacao
from grifo.models.vistoria import StatusVistoria, TipoVistoria, Vistoria

PASSADO = "2000-01-01T00:00:00Z"


async def _vistoria(db_session: AsyncSession, imovel, vistoriador, status: StatusVistoria, cliente=None):
    db_session.add(
        Vistoria(
            empresa_id=imovel.empresa_id,
            imovel_id=imovel.id,
            vistoriador_id=vistoriador.id,
            cliente_id=cliente.id if cliente else None,
            tipo=TipoVistoria.ENTRADA,
            status=status,
        )
    )
    await db_session.commit()


async def _solicitacao(
    db_session: AsyncSession,
    cliente,
    urgencia: UrgenciaSolicitacao,
    status: StatusSolicitacao = StatusSolicitacao.PENDENTE,
):
    db_session.add(
        SolicitacaoVistoria(
            empresa_id=cliente.empresa_id,
            cliente_id=cliente.id,
            endereco_imovel="Rua das Flores, 101",
            tipo=TipoVistoria.ENTRADA,
            urgencia=urgencia,
            status=status,
        )
    )
    await db_session.commit()


@pytest.mark.asyncio
async def test_relatorio_de_vistorias(
    client: AsyncClient,
    db_session: AsyncSession,
    test_admin,
    test_vistoriador,
    test_imovel,
    auth_headers,
):
    await _vistoria(db_session, test_imovel, test_vistoriador, StatusVistoria.FINALIZADA)
    await _vistoria(db_session, test_imovel, test_vistoriador, StatusVistoria.EM_ANDAMENTO)
    await _vistoria(db_session, test_imovel, test_admin, StatusVistoria.CONTESTADA)
    await _vistoria(db_session, test_imovel, test_admin, StatusVistoria.RASCUNHO)
    await _vistoria(db_session, test_imovel, test_admin, StatusVistoria.RASCUNHO)

    response = await client.get("/api/v1/relatorios/vistorias", headers=auth_headers(test_admin))

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["vistorias"]) == 5
    estatisticas = data["estatisticas"]
    assert estatisticas["total"] == 5
    assert estatisticas["por_status"] == {
        "rascunho": 2,
        "em_andamento": 1,
        "finalizada": 1,
        "contestada": 1,
    }
    assert estatisticas["por_vistoriador"] == [
        {"vistoriador_id": str(test_admin.id), "nome": "Admin", "total": 3},
        {"vistoriador_id": str(test_vistoriador.id), "nome": "Vistoriador", "total": 2},
    ]
    # 2 laudos emitidos de 5
    assert estatisticas["taxa_finalizacao"] == 40.0


@pytest.mark.asyncio
async def test_relatorio_de_vistorias_com_filtros(
    client: AsyncClient,
    db_session: AsyncSession,
    test_admin,
    test_vistoriador,
    test_imovel,
    test_cliente,
    auth_headers,
):
    await _vistoria(db_session, test_imovel, test_vistoriador, StatusVistoria.FINALIZADA, test_cliente)
    await _vistoria(db_session, test_imovel, test_vistoriador, StatusVistoria.RASCUNHO, test_cliente)
    await _vistoria(db_session, test_imovel, test_admin, StatusVistoria.FINALIZADA)
    headers = auth_headers(test_admin)

    por_cliente = await client.get(
        "/api/v1/relatorios/vistorias",
        params={"cliente_id": str(test_cliente.id), "status": "finalizada"},
        headers=headers,
    )
    data = por_cliente.json()["data"]
    assert data["estatisticas"]["total"] == 1
    assert data["vistorias"][0]["cliente_id"] == str(test_cliente.id)
    assert data["estatisticas"]["taxa_finalizacao"] == 100.0

    por_vistoriador = await client.get(
        "/api/v1/relatorios/vistorias",
        params={"vistoriador_id": str(test_vistoriador.id)},
        headers=headers,
    )
    assert por_vistoriador.json()["data"]["estatisticas"]["total"] == 2


@pytest.mark.asyncio
async def test_relatorio_de_vistorias_por_periodo(
    client: AsyncClient,
    db_session: AsyncSession,
    test_admin,
    test_vistoriador,
    test_imovel,
    auth_headers,
):
    await _vistoria(db_session, test_imovel, test_vistoriador, StatusVistoria.FINALIZADA)
    headers = auth_headers(test_admin)

    desde_o_passado = await client.get(
        "/api/v1/relatorios/vistorias", params={"data_inicio": PASSADO}, headers=headers
    )
    assert desde_o_passado.json()["data"]["estatisticas"]["total"] == 1
    assert desde_o_passado.json()["data"]["periodo"]["data_fim"] is None

    ate_o_passado = await client.get(
        "/api/v1/relatorios/vistorias", params={"data_fim": PASSADO}, headers=headers
    )
    estatisticas = ate_o_passado.json()["data"]["estatisticas"]
    assert estatisticas["total"] == 0
    assert estatisticas["por_vistoriador"] == []
    assert estatisticas["taxa_finalizacao"] == 0.0


@pytest.mark.asyncio
async def test_relatorio_com_periodo_invertido(client: AsyncClient, test_admin, auth_headers):
    response = await client.get(
        "/api/v1/relatorios/vistorias",
        params={"data_inicio": "2024-02-01T00:00:00Z", "data_fim": "2024-01-01T00:00:00Z"},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_relatorio_de_solicitacoes(
    client: AsyncClient,
    db_session: AsyncSession,
    test_admin,
    test_cliente,
    auth_headers,
):
    await _solicitacao(db_session, test_cliente, UrgenciaSolicitacao.ALTA)
    await _solicitacao(db_session, test_cliente, UrgenciaSolicitacao.ALTA, StatusSolicitacao.APROVADA)
    await _solicitacao(db_session, test_cliente, UrgenciaSolicitacao.BAIXA, StatusSolicitacao.REJEITADA)

    response = await client.get("/api/v1/relatorios/solicitacoes", headers=auth_headers(test_admin))

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["solicitacoes"]) == 3
    estatisticas = data["estatisticas"]
    assert estatisticas["total"] == 3
    assert estatisticas["por_status"] == {"pendente": 1, "aprovada": 1, "rejeitada": 1}
    assert estatisticas["por_urgencia"] == {"alta": 2, "baixa": 1}
    assert estatisticas["por_mes"] == {utcnow().strftime("%Y-%m"): 3}


@pytest.mark.asyncio
async def test_relatorio_de_solicitacoes_por_status(
    client: AsyncClient,
    db_session: AsyncSession,
    test_admin,
    test_cliente,
    auth_headers,
):
    await _solicitacao(db_session, test_cliente, UrgenciaSolicitacao.MEDIA)
    await _solicitacao(db_session, test_cliente, UrgenciaSolicitacao.MEDIA, StatusSolicitacao.APROVADA)

    response = await client.get(
        "/api/v1/relatorios/solicitacoes",
        params={"status": "pendente", "cliente_id": str(test_cliente.id)},
        headers=auth_headers(test_admin),
    )
    assert response.json()["data"]["estatisticas"]["por_status"] == {"pendente": 1}


@pytest.mark.asyncio
async def test_relatorio_isolado_por_empresa(
    client: AsyncClient,
    db_session: AsyncSession,
    test_vistoriador,
    test_imovel,
    test_cliente,
    outro_admin,
    auth_headers,
):
    await _vistoria(db_session, test_imovel, test_vistoriador, StatusVistoria.FINALIZADA)
    await _solicitacao(db_session, test_cliente, UrgenciaSolicitacao.ALTA)
    headers = auth_headers(outro_admin)

    vistorias = await client.get("/api/v1/relatorios/vistorias", headers=headers)
    assert vistorias.json()["data"]["estatisticas"]["total"] == 0

    solicitacoes = await client.get("/api/v1/relatorios/solicitacoes", headers=headers)
    assert solicitacoes.json()["data"]["estatisticas"]["total"] == 0


@pytest.mark.asyncio
async def test_relatorio_superadmin_exige_empresa(
    client: AsyncClient,
    test_superadmin,
    test_empresa,
    auth_headers,
):
    headers = auth_headers(test_superadmin)

    sem_alvo = await client.get("/api/v1/relatorios/solicitacoes", headers=headers)
    assert sem_alvo.status_code == 422

    response = await client.get(
        "/api/v1/relatorios/solicitacoes",
        params={"empresa_id": str(test_empresa.id)},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["empresa_id"] == str(test_empresa.id)


@pytest.mark.asyncio
async def test_relatorio_requer_admin(client: AsyncClient, test_vistoriador, auth_headers):
    response = await client.get("/api/v1/relatorios/vistorias", headers=auth_headers(test_vistoriador))
    assert response.status_code == 403
