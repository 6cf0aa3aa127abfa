"""
Testes para usuários e atribuição de papéis.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from grifo.core.exceptions import FirebaseAuthError
from grifo.models.usuario import Usuario, UserRole


@pytest.mark.asyncio
async def test_admin_cria_vistoriador(client: AsyncClient, test_admin, test_empresa, auth_headers):
    response = await client.post(
        "/api/v1/usuarios",
        json={
            "email": "novo@teste.com",
            "nome": "Novo Vistoriador",
            "role": "vistoriador",
            "password": "senha-segura",
        },
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["empresa_id"] == str(test_empresa.id)
    assert data["role"] == "vistoriador"


@pytest.mark.asyncio
async def test_admin_nao_cria_superadmin(client: AsyncClient, test_admin, auth_headers):
    response = await client.post(
        "/api/v1/usuarios",
        json={"email": "root2@teste.com", "nome": "Root", "role": "superadmin"},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_email_duplicado(client: AsyncClient, test_admin, test_vistoriador, auth_headers):
    response = await client.post(
        "/api/v1/usuarios",
        json={"email": test_vistoriador.email, "nome": "Outro"},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_listar_usuarios_por_papel(
    client: AsyncClient,
    test_admin,
    test_vistoriador,
    outro_admin,
    auth_headers,
):
    response = await client.get(
        "/api/v1/usuarios",
        params={"role": "vistoriador"},
        headers=auth_headers(test_admin),
    )
    data = response.json()
    assert data["total"] == 1
    assert data["data"][0]["id"] == str(test_vistoriador.id)


@pytest.mark.asyncio
async def test_atribuir_papel_cria_e_atualiza(
    client: AsyncClient,
    db_session: AsyncSession,
    test_superadmin,
    test_empresa,
    outra_empresa,
    identity_provider,
    auth_headers,
):
    """Atribuir papel duas vezes ao mesmo uid mantém uma única linha."""
    identity_provider.registrar("fb-123", "campo@teste.com", nome="Vistoriador de Campo")
    headers = auth_headers(test_superadmin)

    primeira = await client.post(
        "/api/v1/usuarios/atribuir-papel",
        json={"firebase_uid": "fb-123", "role": "vistoriador", "empresa_id": str(test_empresa.id)},
        headers=headers,
    )
    assert primeira.status_code == 200
    usuario_id = primeira.json()["data"]["id"]

    segunda = await client.post(
        "/api/v1/usuarios/atribuir-papel",
        json={"firebase_uid": "fb-123", "role": "admin", "empresa_id": str(outra_empresa.id)},
        headers=headers,
    )
    assert segunda.status_code == 200
    data = segunda.json()["data"]
    assert data["id"] == usuario_id
    assert data["role"] == "admin"
    assert data["empresa_id"] == str(outra_empresa.id)

    total = await db_session.scalar(
        select(func.count()).select_from(Usuario).where(Usuario.firebase_uid == "fb-123")
    )
    assert total == 1

    # Claims espelhados no provedor a cada atribuição
    assert identity_provider.claims_atualizados[-1] == (
        "fb-123",
        {"role": "admin", "empresa_id": str(outra_empresa.id)},
    )


@pytest.mark.asyncio
async def test_atribuir_papel_uid_desconhecido(
    client: AsyncClient,
    test_superadmin,
    test_empresa,
    auth_headers,
):
    response = await client.post(
        "/api/v1/usuarios/atribuir-papel",
        json={"firebase_uid": "nao-existe", "role": "admin", "empresa_id": str(test_empresa.id)},
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_atribuir_papel_exige_empresa(client: AsyncClient, test_superadmin, identity_provider, auth_headers):
    identity_provider.registrar("fb-456", "sem-empresa@teste.com")
    response = await client.post(
        "/api/v1/usuarios/atribuir-papel",
        json={"firebase_uid": "fb-456", "role": "admin"},
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_atribuir_papel_em_empresa_inativa(
    client: AsyncClient,
    db_session: AsyncSession,
    test_superadmin,
    outra_empresa,
    identity_provider,
    auth_headers,
):
    outra_empresa.ativa = False
    await db_session.commit()
    identity_provider.registrar("fb-789", "inativa@teste.com")

    response = await client.post(
        "/api/v1/usuarios/atribuir-papel",
        json={"firebase_uid": "fb-789", "role": "admin", "empresa_id": str(outra_empresa.id)},
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TENANT_INACTIVE"


@pytest.mark.asyncio
async def test_admin_nao_atribui_papel(
    client: AsyncClient,
    test_admin,
    test_empresa,
    identity_provider,
    auth_headers,
):
    identity_provider.registrar("fb-999", "x@teste.com")
    response = await client.post(
        "/api/v1/usuarios/atribuir-papel",
        json={"firebase_uid": "fb-999", "role": "admin", "empresa_id": str(test_empresa.id)},
        headers=auth_headers(test_admin),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_atribuir_papel_com_falha_nos_claims(
    client: AsyncClient,
    db_session: AsyncSession,
    test_superadmin,
    test_empresa,
    identity_provider,
    auth_headers,
    monkeypatch,
):
    """Provedor fora do ar não impede a atribuição; o perfil fica gravado."""
    identity_provider.registrar("fb-789", "claims@teste.com")

    async def falhar(uid, claims):
        raise FirebaseAuthError("Provedor indisponível")

    monkeypatch.setattr(identity_provider, "update_claims", falhar)

    response = await client.post(
        "/api/v1/usuarios/atribuir-papel",
        json={"firebase_uid": "fb-789", "role": "admin", "empresa_id": str(test_empresa.id)},
        headers=auth_headers(test_superadmin),
    )
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"

    usuario = await db_session.scalar(
        select(Usuario)
        .where(Usuario.firebase_uid == "fb-789")
        .execution_options(populate_existing=True)
    )
    assert usuario.role == UserRole.ADMIN
    assert usuario.empresa_id == test_empresa.id
    assert identity_provider.claims_atualizados == []
