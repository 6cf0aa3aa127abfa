"""
Pytest fixtures para testes do Grifo Vistorias.
"""
from typing import Any, AsyncGenerator
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import grifo.models  # noqa: F401 - registra os modelos no metadata
from grifo.main import app
from grifo.db.base import Base
from grifo.core.dependencies import get_db, get_identity_provider, get_storage
from grifo.core.exceptions import InvalidTokenError
from grifo.core.firebase_auth import IdentidadeExterna
from grifo.core.security import create_access_token, get_password_hash
from grifo.core.storage import (
    CategoriaArquivo,
    StorageService,
    gerar_caminho,
    validar_arquivo,
)
from grifo.models.empresa import Empresa
from grifo.models.imovel import Imovel, TipoImovel
from grifo.models.cliente import Cliente
from grifo.models.usuario import Usuario, UserRole

# Banco em memória compartilhado por uma única conexão
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class FakeIdentityProvider:
    """Provedor de identidade em memória."""

    def __init__(self):
        self.usuarios: dict[str, IdentidadeExterna] = {}
        self.tokens: dict[str, str] = {}
        self.claims_atualizados: list[tuple[str, dict[str, Any]]] = []

    def registrar(self, uid: str, email: str, nome: str = "Usuário Firebase", token: str | None = None):
        self.usuarios[uid] = IdentidadeExterna(uid=uid, email=email, nome=nome)
        if token:
            self.tokens[token] = uid

    async def resolve(self, token: str) -> IdentidadeExterna:
        uid = self.tokens.get(token)
        if uid is None:
            raise InvalidTokenError()
        return self.usuarios[uid]

    async def get_user(self, uid: str) -> IdentidadeExterna | None:
        return self.usuarios.get(uid)

    async def update_claims(self, uid: str, claims: dict[str, Any]) -> None:
        self.claims_atualizados.append((uid, claims))


class FakeStorage(StorageService):
    """Storage que guarda os arquivos em um dicionário."""

    def __init__(self):
        super().__init__()
        self.arquivos: dict[str, bytes] = {}

    async def upload_file(
        self,
        file_content: bytes,
        original_filename: str,
        mime_type: str,
        empresa_id: UUID,
        vistoria_id: UUID,
        categoria: CategoriaArquivo,
    ) -> str:
        validar_arquivo(len(file_content), mime_type, categoria)
        caminho = gerar_caminho(empresa_id, vistoria_id, categoria, original_filename)
        self.arquivos[caminho] = file_content
        return caminho

    async def delete_file(self, gcs_path: str) -> bool:
        self.arquivos.pop(gcs_path, None)
        return True


def _auth_headers(usuario: Usuario) -> dict[str, str]:
    token = create_access_token(subject=str(usuario.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Header Authorization com JWT local do usuário."""
    return _auth_headers


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Cria sessão de banco de dados para cada teste."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _salvar(db_session: AsyncSession, obj):
    db_session.add(obj)
    await db_session.commit()
    await db_session.refresh(obj)
    return obj


@pytest_asyncio.fixture
async def test_empresa(db_session: AsyncSession) -> Empresa:
    """Cria empresa de teste."""
    return await _salvar(
        db_session,
        Empresa(
            id=uuid4(),
            nome="Vistorias Teste",
            cnpj="12345678000100",
            email="contato@vistoriasteste.com",
        ),
    )


@pytest_asyncio.fixture
async def outra_empresa(db_session: AsyncSession) -> Empresa:
    """Segunda empresa, para os testes de isolamento."""
    return await _salvar(
        db_session,
        Empresa(
            id=uuid4(),
            nome="Outra Vistoriadora",
            cnpj="98765432000199",
        ),
    )


async def _usuario(
    db_session: AsyncSession,
    email: str,
    role: UserRole,
    empresa: Empresa | None,
) -> Usuario:
    return await _salvar(
        db_session,
        Usuario(
            id=uuid4(),
            email=email,
            nome=email.split("@")[0].title(),
            hashed_password=get_password_hash("password123"),
            role=role,
            empresa_id=empresa.id if empresa else None,
        ),
    )


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession, test_empresa: Empresa) -> Usuario:
    return await _usuario(db_session, "admin@teste.com", UserRole.ADMIN, test_empresa)


@pytest_asyncio.fixture
async def test_vistoriador(db_session: AsyncSession, test_empresa: Empresa) -> Usuario:
    return await _usuario(db_session, "vistoriador@teste.com", UserRole.VISTORIADOR, test_empresa)


@pytest_asyncio.fixture
async def test_corretor(db_session: AsyncSession, test_empresa: Empresa) -> Usuario:
    return await _usuario(db_session, "corretor@teste.com", UserRole.CORRETOR, test_empresa)


@pytest_asyncio.fixture
async def test_superadmin(db_session: AsyncSession) -> Usuario:
    return await _usuario(db_session, "root@grifo.com", UserRole.SUPERADMIN, None)


@pytest_asyncio.fixture
async def outro_admin(db_session: AsyncSession, outra_empresa: Empresa) -> Usuario:
    return await _usuario(db_session, "admin@outra.com", UserRole.ADMIN, outra_empresa)


@pytest_asyncio.fixture
async def test_imovel(db_session: AsyncSession, test_empresa: Empresa) -> Imovel:
    return await _salvar(
        db_session,
        Imovel(
            empresa_id=test_empresa.id,
            codigo="AP-101",
            tipo=TipoImovel.APARTAMENTO,
            endereco="Rua das Flores, 101",
            cidade="Curitiba",
            estado="PR",
        ),
    )


@pytest_asyncio.fixture
async def test_cliente(db_session: AsyncSession, test_empresa: Empresa) -> Cliente:
    return await _salvar(
        db_session,
        Cliente(
            empresa_id=test_empresa.id,
            nome="Maria Locatária",
            email="maria@cliente.com",
        ),
    )


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    identity_provider: FakeIdentityProvider,
    storage: FakeStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Cliente HTTP com banco, provedor de identidade e storage de teste.

    A autenticação é feita por requisição com ``auth_headers``.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def unauthenticated_client() -> AsyncGenerator[AsyncClient, None]:
    """Cria cliente HTTP sem overrides (rotas que não tocam o banco)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
