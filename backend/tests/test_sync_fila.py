"""
Testes da fila de sincronização offline.

O servidor é simulado por ``RemotoFalso``, que guarda o que recebeu e
devolve o mesmo id para a mesma chave de idempotência.
"""
import asyncio
from collections import defaultdict
from pathlib import Path
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy import select

from grifo.core.exceptions import (
    AuthenticationError,
    BusinessRuleError,
    ResourceNotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from grifo.models.vistoria import TipoVistoria
from grifo.sync import ArmazenamentoLocal, EstadoSync, FilaSincronizacao
from grifo.sync.models import FotoLocal, ItemUpload, TipoUpload, VistoriaRascunho


class RemotoFalso:
    """Servidor em memória com as mesmas operações do ClienteRemoto."""

    def __init__(self):
        self.vistorias: dict[str, UUID] = {}
        self.ambientes: dict[str, UUID] = {}
        self.fotos: dict[str, dict] = {}
        self.laudos: list[str] = []
        self.finalizadas: dict[UUID, str] = {}
        self.chamadas: list[str] = []
        # Exceções levantadas antes de executar a operação
        self.falhas: dict[str, list[Exception]] = defaultdict(list)
        # Exceções levantadas depois de executar (resposta perdida)
        self.falhas_apos: dict[str, list[Exception]] = defaultdict(list)
        self.bloqueio: asyncio.Event | None = None

    async def _antes(self, operacao: str) -> None:
        self.chamadas.append(operacao)
        if self.bloqueio is not None:
            await self.bloqueio.wait()
        if self.falhas[operacao]:
            raise self.falhas[operacao].pop(0)

    def _depois(self, operacao: str) -> None:
        if self.falhas_apos[operacao]:
            raise self.falhas_apos[operacao].pop(0)

    async def criar_vistoria(self, payload, idempotency_key):
        await self._antes("criar_vistoria")
        vistoria_id = self.vistorias.setdefault(idempotency_key, uuid4())
        self._depois("criar_vistoria")
        return {"id": str(vistoria_id), "status": payload["status"]}

    async def criar_ambiente(self, vistoria_id, payload, idempotency_key):
        await self._antes("criar_ambiente")
        ambiente_id = self.ambientes.setdefault(idempotency_key, uuid4())
        return {"id": str(ambiente_id), "vistoria_id": str(vistoria_id)}

    async def enviar_foto(
        self,
        vistoria_id,
        conteudo,
        filename,
        content_type,
        idempotency_key,
        ambiente_id=None,
        legenda=None,
        ordem=0,
    ):
        await self._antes("enviar_foto")
        foto = self.fotos.setdefault(
            idempotency_key,
            {"id": str(uuid4()), "vistoria_id": vistoria_id, "ambiente_id": ambiente_id},
        )
        return foto

    async def enviar_laudo(self, vistoria_id, conteudo, filename):
        await self._antes("enviar_laudo")
        url = f"https://storage.test/{vistoria_id}/{filename}"
        self.laudos.append(url)
        return {"storage_path": f"{vistoria_id}/{filename}", "pdf_url": url}

    async def finalizar(self, vistoria_id, pdf_url):
        await self._antes("finalizar")
        self.finalizadas.setdefault(vistoria_id, pdf_url)
        return {"ja_finalizada": False}


@pytest_asyncio.fixture
async def armazenamento():
    armazenamento = ArmazenamentoLocal.em_memoria()
    await armazenamento.inicializar()
    yield armazenamento
    await armazenamento.fechar()


@pytest.fixture
def remoto() -> RemotoFalso:
    return RemotoFalso()


@pytest.fixture
def fila(armazenamento, remoto) -> FilaSincronizacao:
    return FilaSincronizacao(armazenamento, remoto, max_tentativas=3, intervalo_segundos=0.01)


@pytest.fixture
def arquivo(tmp_path: Path):
    def criar(nome: str, conteudo: bytes = b"\xff\xd8\xff") -> str:
        caminho = tmp_path / nome
        caminho.write_bytes(conteudo)
        return str(caminho)

    return criar


async def _obter(armazenamento, model, local_id):
    async with armazenamento.sessao() as session:
        return await session.get(model, local_id)


@pytest.mark.asyncio
async def test_drenagem_completa(fila, remoto, armazenamento, arquivo):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    ambiente = await fila.registrar_ambiente(rascunho.local_id, "Cozinha")
    foto = await fila.registrar_foto(rascunho.local_id, arquivo("pia.jpg"), ambiente.local_id)
    await fila.registrar_laudo(rascunho.local_id, arquivo("laudo.pdf", b"%PDF"))

    resultado = await fila.conectividade_restaurada()

    assert resultado.sincronizados == 3
    assert resultado.falhas == 0
    assert remoto.chamadas == [
        "criar_vistoria",
        "criar_ambiente",
        "enviar_foto",
        "enviar_laudo",
        "finalizar",
    ]

    vistoria_id = remoto.vistorias[str(rascunho.local_id)]
    assert remoto.fotos[str(foto.local_id)]["ambiente_id"] == remoto.ambientes[str(ambiente.local_id)]
    assert remoto.finalizadas[vistoria_id] == remoto.laudos[0]

    salvo = await _obter(armazenamento, VistoriaRascunho, rascunho.local_id)
    assert salvo.estado == EstadoSync.SYNCED
    assert salvo.server_id == vistoria_id

    estatisticas = await fila.estatisticas()
    assert estatisticas.rascunhos_pendentes == 0
    assert estatisticas.fotos_pendentes == 0
    assert estatisticas.pdfs_pendentes == 0
    assert estatisticas.erros == 0


@pytest.mark.asyncio
async def test_resposta_perdida_nao_duplica(fila, remoto, armazenamento):
    """Servidor criou mas a resposta não chegou: o reenvio usa a mesma chave."""
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.SAIDA)
    remoto.falhas_apos["criar_vistoria"].append(UpstreamUnavailableError("api", "timeout"))

    primeira = await fila.drenar()
    assert primeira.falhas == 1
    salvo = await _obter(armazenamento, VistoriaRascunho, rascunho.local_id)
    assert salvo.estado == EstadoSync.PENDING_SYNC
    assert salvo.server_id is None

    segunda = await fila.drenar()
    assert segunda.sincronizados == 1
    assert len(remoto.vistorias) == 1
    assert remoto.chamadas.count("criar_vistoria") == 2


@pytest.mark.asyncio
async def test_vistoria_criada_nao_e_reenviada(fila, remoto, armazenamento):
    """Falha no ambiente não reenvia a vistoria já criada."""
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    await fila.registrar_ambiente(rascunho.local_id, "Sala")
    remoto.falhas["criar_ambiente"].append(UpstreamUnavailableError("api", "HTTP 503"))

    await fila.drenar()
    salvo = await _obter(armazenamento, VistoriaRascunho, rascunho.local_id)
    assert salvo.server_id is not None
    assert salvo.tentativas == 1

    await fila.drenar()
    assert remoto.chamadas.count("criar_vistoria") == 1
    assert len(remoto.ambientes) == 1


@pytest.mark.asyncio
async def test_erro_de_validacao_e_terminal(fila, remoto, armazenamento):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    remoto.falhas["criar_vistoria"].append(ValidationError("imóvel não encontrado"))

    resultado = await fila.drenar()
    assert resultado.falhas == 1

    salvo = await _obter(armazenamento, VistoriaRascunho, rascunho.local_id)
    assert salvo.estado == EstadoSync.ERROR
    assert salvo.tentativas == 1
    assert salvo.ultimo_erro == "imóvel não encontrado"

    await fila.drenar()
    assert remoto.chamadas.count("criar_vistoria") == 1


@pytest.mark.asyncio
async def test_falha_retentavel_vira_erro_no_limite(fila, remoto, armazenamento):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.PERIODICA)
    remoto.falhas["criar_vistoria"].extend(
        UpstreamUnavailableError("api", "HTTP 502") for _ in range(5)
    )

    for esperado in (1, 2):
        await fila.drenar()
        salvo = await _obter(armazenamento, VistoriaRascunho, rascunho.local_id)
        assert salvo.tentativas == esperado
        assert salvo.estado == EstadoSync.PENDING_SYNC

    await fila.drenar()
    salvo = await _obter(armazenamento, VistoriaRascunho, rascunho.local_id)
    assert salvo.tentativas == 3
    assert salvo.estado == EstadoSync.ERROR

    # Item em erro não é mais tentado
    await fila.drenar()
    assert remoto.chamadas.count("criar_vistoria") == 3


@pytest.mark.asyncio
async def test_401_interrompe_sem_contar_tentativa(fila, remoto, armazenamento):
    primeiro = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    segundo = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    remoto.falhas["criar_vistoria"].append(AuthenticationError("Token expirado"))

    resultado = await fila.drenar()
    assert resultado.interrompida is True
    assert remoto.chamadas == ["criar_vistoria"]

    for local_id in (primeiro.local_id, segundo.local_id):
        salvo = await _obter(armazenamento, VistoriaRascunho, local_id)
        assert salvo.estado == EstadoSync.PENDING_SYNC
        assert salvo.tentativas == 0

    resultado = await fila.drenar()
    assert resultado.sincronizados == 2


@pytest.mark.asyncio
async def test_drenagem_concorrente_nao_executa(fila, remoto):
    await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    remoto.bloqueio = asyncio.Event()

    primeira = asyncio.create_task(fila.drenar())
    while not remoto.chamadas:
        await asyncio.sleep(0)
    assert fila.drenando is True

    concorrente = await fila.drenar()
    assert concorrente.executada is False

    remoto.bloqueio.set()
    resultado = await primeira
    assert resultado.executada is True
    assert resultado.sincronizados == 1
    assert fila.drenando is False


@pytest.mark.asyncio
async def test_fotos_aguardam_a_vistoria(fila, remoto, armazenamento, arquivo):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    await fila.registrar_foto(rascunho.local_id, arquivo("fachada.jpg"))
    remoto.falhas["criar_vistoria"].append(UpstreamUnavailableError("api", "offline"))

    resultado = await fila.drenar()
    assert resultado.ignorados == 1
    assert "enviar_foto" not in remoto.chamadas

    async with armazenamento.sessao() as session:
        item = (await session.execute(select(ItemUpload))).scalar_one()
    assert item.tentativas == 0
    assert item.estado == EstadoSync.PENDING_SYNC

    resultado = await fila.drenar()
    assert resultado.sincronizados == 2


@pytest.mark.asyncio
async def test_laudo_aguarda_todas_as_fotos(fila, remoto, arquivo):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.SAIDA)
    await fila.registrar_foto(rascunho.local_id, arquivo("quarto.jpg"))
    await fila.registrar_laudo(rascunho.local_id, arquivo("laudo.pdf", b"%PDF"))
    remoto.falhas["enviar_foto"].append(UpstreamUnavailableError("api", "HTTP 500"))

    resultado = await fila.drenar()
    assert resultado.ignorados == 1
    assert "enviar_laudo" not in remoto.chamadas
    assert not remoto.finalizadas

    await fila.drenar()
    assert len(remoto.finalizadas) == 1


@pytest.mark.asyncio
async def test_laudo_nao_e_reenviado_se_so_a_finalizacao_falhou(fila, remoto, arquivo):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    await fila.registrar_laudo(rascunho.local_id, arquivo("laudo.pdf", b"%PDF"))
    remoto.falhas["finalizar"].append(UpstreamUnavailableError("api", "HTTP 503"))

    await fila.drenar()
    await fila.drenar()

    assert remoto.chamadas.count("enviar_laudo") == 1
    assert remoto.chamadas.count("finalizar") == 2
    assert list(remoto.finalizadas.values()) == remoto.laudos


@pytest.mark.asyncio
async def test_arquivo_ausente_e_retentavel(fila, remoto, armazenamento, tmp_path):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    await fila.registrar_foto(rascunho.local_id, str(tmp_path / "nao-existe.jpg"))

    resultado = await fila.drenar()
    assert resultado.falhas == 1

    async with armazenamento.sessao() as session:
        item = (await session.execute(select(ItemUpload))).scalar_one()
    assert item.estado == EstadoSync.PENDING_SYNC
    assert item.tentativas == 1


@pytest.mark.asyncio
async def test_reenviar(fila, remoto, armazenamento):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)

    with pytest.raises(ResourceNotFoundError):
        await fila.reenviar(uuid4())
    with pytest.raises(BusinessRuleError):
        await fila.reenviar(rascunho.local_id)

    remoto.falhas["criar_vistoria"].append(ValidationError("dados inválidos"))
    await fila.drenar()

    item = await fila.reenviar(rascunho.local_id)
    assert item.estado == EstadoSync.PENDING_SYNC
    assert item.tentativas == 0

    resultado = await fila.drenar()
    assert resultado.sincronizados == 1


@pytest.mark.asyncio
async def test_ambiente_novo_reabre_vistoria_sincronizada(fila, remoto, armazenamento):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    await fila.drenar()

    await fila.registrar_ambiente(rascunho.local_id, "Banheiro")
    salvo = await _obter(armazenamento, VistoriaRascunho, rascunho.local_id)
    assert salvo.estado == EstadoSync.LOCAL_ONLY

    await fila.drenar()
    assert remoto.chamadas.count("criar_vistoria") == 1
    assert len(remoto.ambientes) == 1


@pytest.mark.asyncio
async def test_limpar_sincronizados(fila, remoto, armazenamento, arquivo):
    enviado = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    caminho_enviado = arquivo("enviada.jpg")
    await fila.registrar_foto(enviado.local_id, caminho_enviado)
    await fila.drenar()

    pendente = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    caminho_pendente = arquivo("pendente.jpg")
    await fila.registrar_foto(pendente.local_id, caminho_pendente)

    removidos = await fila.limpar_sincronizados()

    assert removidos == 1
    assert not Path(caminho_enviado).exists()
    assert Path(caminho_pendente).exists()

    estatisticas = await fila.estatisticas()
    assert estatisticas.rascunhos_pendentes == 1
    assert estatisticas.fotos_pendentes == 1


@pytest.mark.asyncio
async def test_foto_com_ambiente_de_outra_vistoria(fila, arquivo):
    primeira = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    segunda = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    ambiente = await fila.registrar_ambiente(primeira.local_id, "Sala")

    with pytest.raises(ResourceNotFoundError):
        await fila.registrar_foto(segunda.local_id, arquivo("x.jpg"), ambiente.local_id)


@pytest.mark.asyncio
async def test_foto_de_ambiente_ja_sincronizado_leva_id_do_servidor(fila, remoto, armazenamento, arquivo):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    ambiente = await fila.registrar_ambiente(rascunho.local_id, "Varanda")
    await fila.drenar()

    foto = await fila.registrar_foto(rascunho.local_id, arquivo("varanda.jpg"), ambiente.local_id)
    salva = await _obter(armazenamento, FotoLocal, foto.local_id)
    assert salva.ambiente_id_servidor == remoto.ambientes[str(ambiente.local_id)]


@pytest.mark.asyncio
async def test_agendamento_periodico(fila, remoto):
    await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)

    fila.iniciar_agendamento()
    try:
        async with asyncio.timeout(2):
            while not remoto.vistorias:
                await asyncio.sleep(0.01)
    finally:
        await fila.parar_agendamento()

    assert len(remoto.vistorias) == 1


@pytest.mark.asyncio
async def test_foto_em_erro_bloqueia_o_laudo(fila, remoto, armazenamento, arquivo):
    rascunho = await fila.registrar_vistoria(uuid4(), TipoVistoria.ENTRADA)
    await fila.registrar_foto(rascunho.local_id, arquivo("banheiro.jpg"))
    laudo = await fila.registrar_laudo(rascunho.local_id, arquivo("laudo.pdf", b"%PDF"))
    remoto.falhas["enviar_foto"].append(ValidationError("tipo de arquivo não permitido"))

    resultado = await fila.drenar()
    assert resultado.falhas == 2
    assert "enviar_laudo" not in remoto.chamadas

    salvo = await _obter(armazenamento, ItemUpload, laudo.local_id)
    assert salvo.estado == EstadoSync.ERROR
    assert salvo.tentativas == 0
    assert "banheiro.jpg" in salvo.ultimo_erro

    estatisticas = await fila.estatisticas()
    assert estatisticas.erros == 2
    assert estatisticas.pdfs_pendentes == 0

    async with armazenamento.sessao() as session:
        foto_item = (
            await session.execute(select(ItemUpload).where(ItemUpload.tipo == TipoUpload.FOTO))
        ).scalar_one()
    await fila.reenviar(foto_item.local_id)
    await fila.reenviar(laudo.local_id)

    resultado = await fila.drenar()
    assert resultado.sincronizados == 2
    assert len(remoto.finalizadas) == 1
