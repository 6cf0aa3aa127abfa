"""
Fila de sincronização contra a API real (ASGI em memória).
"""
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport
from sqlalchemy import func, select

from grifo.core.security import create_access_token
from grifo.main import app
from grifo.models.vistoria import StatusVistoria, TipoVistoria, Vistoria
from grifo.sync import ArmazenamentoLocal, ClienteRemoto, FilaSincronizacao


@pytest_asyncio.fixture
async def armazenamento():
    armazenamento = ArmazenamentoLocal.em_memoria()
    await armazenamento.inicializar()
    yield armazenamento
    await armazenamento.fechar()


@pytest.fixture
def remoto(client, test_vistoriador) -> ClienteRemoto:
    # ``client`` aplica os overrides de banco e storage no app
    return ClienteRemoto(
        "http://test/api/v1",
        create_access_token(subject=str(test_vistoriador.id)),
        transport=ASGITransport(app=app),
    )


@pytest.mark.asyncio
async def test_vistoria_offline_chega_finalizada(
    armazenamento, remoto, db_session, test_imovel, storage, tmp_path
):
    foto = tmp_path / "sala.jpg"
    foto.write_bytes(b"\xff\xd8\xff\xe0")
    laudo = tmp_path / "laudo.pdf"
    laudo.write_bytes(b"%PDF-1.4")

    fila = FilaSincronizacao(armazenamento, remoto)
    rascunho = await fila.registrar_vistoria(test_imovel.id, TipoVistoria.ENTRADA)
    ambiente = await fila.registrar_ambiente(rascunho.local_id, "Sala")
    await fila.registrar_foto(rascunho.local_id, str(foto), ambiente.local_id)
    await fila.registrar_laudo(rascunho.local_id, str(laudo))

    resultado = await fila.drenar()

    assert resultado.falhas == 0
    assert resultado.sincronizados == 3

    vistorias = (await db_session.execute(select(Vistoria))).scalars().all()
    assert len(vistorias) == 1
    vistoria = await db_session.get(Vistoria, vistorias[0].id, populate_existing=True)
    assert vistoria.status == StatusVistoria.FINALIZADA
    assert vistoria.pdf_url is not None
    assert len(storage.arquivos) == 2


@pytest.mark.asyncio
async def test_reenvio_do_mesmo_rascunho_nao_duplica(remoto, db_session, test_imovel):
    payload = {
        "imovel_id": str(test_imovel.id),
        "tipo": "saida",
        "status": "em_andamento",
    }
    chave = "0b8a4e0e-6f1c-4a55-9d1e-3f6f0f7c1a01"

    primeira = await remoto.criar_vistoria(payload, idempotency_key=chave)
    segunda = await remoto.criar_vistoria(payload, idempotency_key=chave)

    assert primeira["id"] == segunda["id"]
    total = await db_session.scalar(select(func.count()).select_from(Vistoria))
    assert total == 1
    assert UUID(primeira["id"])


@pytest.mark.asyncio
async def test_token_invalido_interrompe_drenagem(armazenamento, client, test_imovel):
    remoto = ClienteRemoto(
        "http://test/api/v1",
        "token-invalido",
        transport=ASGITransport(app=app),
    )
    fila = FilaSincronizacao(armazenamento, remoto)
    await fila.registrar_vistoria(test_imovel.id, TipoVistoria.ENTRADA)

    resultado = await fila.drenar()

    assert resultado.interrompida is True
    assert (await fila.estatisticas()).rascunhos_pendentes == 1
