"""
Testes para utilitários e helpers.
"""
from datetime import timedelta
from uuid import uuid4

import pytest

from grifo.core.exceptions import (
    ContestLinkInvalidError,
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidStatusTransitionError,
    TenantAccessError,
    TenantInactiveError,
    UpstreamUnavailableError,
)
from grifo.core.middleware import status_for
from grifo.core.security import (
    create_access_token,
    generate_public_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from grifo.core.storage import CategoriaArquivo, gerar_caminho, validar_arquivo
from grifo.schemas.base import APIResponse, PaginatedResponse
from grifo.services.dashboard_service import _percentual


def test_password_hashing():
    """Testa hash e verificação de senha."""
    password = "my_secure_password"
    hashed = get_password_hash(password)

    assert hashed != password
    assert verify_password(password, hashed) is True
    assert verify_password("wrong_password", hashed) is False


def test_create_access_token():
    """Testa criação de token JWT."""
    usuario_id = uuid4()
    token = create_access_token(usuario_id, additional_claims={"role": "admin"})

    payload = verify_token(token)
    assert payload is not None
    assert payload["sub"] == str(usuario_id)
    assert payload["role"] == "admin"


def test_expired_token_is_rejected():
    token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-10))
    assert verify_token(token) is None


def test_public_token_is_unique():
    assert generate_public_token() != generate_public_token()


def test_api_response_model():
    """Testa modelo de resposta da API."""
    response = APIResponse(success=True, data={"key": "value"}, message="OK")

    assert response.success is True
    assert response.data == {"key": "value"}
    assert response.message == "OK"


def test_paginated_response_pages():
    response = PaginatedResponse(data=[1, 2], total=45, page=1, page_size=20)
    assert response.pages == 3


def test_status_map():
    """Exceções de domínio mapeiam para o status HTTP correto."""
    empresa_id = uuid4()
    assert status_for(TenantAccessError()) == 403
    assert status_for(TenantInactiveError(empresa_id)) == 400
    assert status_for(InvalidStatusTransitionError(uuid4(), "rascunho", "finalizar")) == 400
    assert status_for(ContestLinkInvalidError()) == 400
    assert status_for(UpstreamUnavailableError("drive", "timeout")) == 503


def test_error_codes():
    assert TenantInactiveError(uuid4()).code == "TENANT_INACTIVE"
    assert InvalidStatusTransitionError(uuid4(), "rascunho", "finalizar").code == "INVALID_STATUS_TRANSITION"
    assert ContestLinkInvalidError().code == "INVALID_TOKEN"


def test_storage_path_layout():
    empresa_id, vistoria_id = uuid4(), uuid4()
    caminho = gerar_caminho(empresa_id, vistoria_id, CategoriaArquivo.FOTO, "../../sala.jpg")

    assert caminho.startswith(f"{empresa_id}/{vistoria_id}/fotos/")
    assert caminho.endswith("_sala.jpg")
    assert ".." not in caminho


def test_validar_arquivo():
    validar_arquivo(1024, "image/jpeg", CategoriaArquivo.FOTO)

    with pytest.raises(InvalidFileTypeError):
        validar_arquivo(1024, "application/pdf", CategoriaArquivo.FOTO)
    with pytest.raises(FileTooLargeError):
        validar_arquivo(500 * 1024 * 1024, "application/pdf", CategoriaArquivo.RELATORIO)


def test_percentual():
    assert _percentual(0, 0) == 0.0
    assert _percentual(1, 3) == 33.33
    assert _percentual(2, 2) == 100.0
