"""
Espelhamento de laudos no Google Drive.

Autenticação por conta de serviço: um JWT assinado com a chave da conta
(google-auth) é trocado por um access token, usado nas chamadas da API
do Drive feitas com httpx. Só roda com GOOGLE_SERVICE_ACCOUNT_FILE e
GOOGLE_DRIVE_FOLDER_ID configurados.
"""

import json
import time
from typing import Any

import httpx
import structlog
from google.auth import crypt, jwt
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from grifo.core.config import settings
from grifo.core.exceptions import UpstreamUnavailableError

logger = structlog.get_logger()

TOKEN_URI = "https://oauth2.googleapis.com/token"
DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files?uploadType=multipart"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive.file"
FOLDER_MIME = "application/vnd.google-apps.folder"


class ErroTransitorioDrive(Exception):
    """Resposta 5xx/429 do Google: vale tentar de novo."""


def _verificar_resposta(response: httpx.Response) -> dict[str, Any]:
    if response.status_code == 429 or response.status_code >= 500:
        raise ErroTransitorioDrive(f"HTTP {response.status_code}")
    if response.is_error:
        raise UpstreamUnavailableError("Google Drive", f"HTTP {response.status_code}: {response.text}")
    return response.json()


_retry_transitorio = retry(
    retry=retry_if_exception_type((httpx.TransportError, ErroTransitorioDrive)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleDriveClient:
    """
    Cliente mínimo da API do Drive.

    Uso:
        client = GoogleDriveClient()
        url = await client.upload_pdf("laudo.pdf", conteudo, "Empresa X")
    """

    def __init__(
        self,
        service_account_file: str | None = None,
        folder_id: str | None = None,
        timeout: float | None = None,
    ):
        self.service_account_file = service_account_file or settings.GOOGLE_SERVICE_ACCOUNT_FILE
        self.folder_id = folder_id or settings.GOOGLE_DRIVE_FOLDER_ID
        self.timeout = timeout or settings.GOOGLE_DRIVE_TIMEOUT_SECONDS

    @property
    def habilitado(self) -> bool:
        return bool(self.service_account_file and self.folder_id)

    def _assertion(self) -> bytes:
        """JWT assinado com a chave privada da conta de serviço."""
        with open(self.service_account_file, encoding="utf-8") as f:
            info = json.load(f)

        signer = crypt.RSASigner.from_service_account_info(info)
        agora = int(time.time())
        payload = {
            "iss": info["client_email"],
            "scope": DRIVE_SCOPE,
            "aud": TOKEN_URI,
            "iat": agora,
            "exp": agora + 3600,
        }
        return jwt.encode(signer, payload)

    @_retry_transitorio
    async def _access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            TOKEN_URI,
            data={
                "grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer",
                "assertion": self._assertion().decode("utf-8"),
            },
        )
        return _verificar_resposta(response)["access_token"]

    @_retry_transitorio
    async def _pasta_da_empresa(
        self,
        client: httpx.AsyncClient,
        headers: dict[str, str],
        empresa_nome: str,
    ) -> str:
        """Encontra ou cria a pasta da empresa dentro da pasta raiz."""
        nome = empresa_nome.replace("'", "\\'")
        query = (
            f"name = '{nome}' and mimeType = '{FOLDER_MIME}' "
            f"and '{self.folder_id}' in parents and trashed = false"
        )
        response = await client.get(
            DRIVE_FILES_URL,
            params={"q": query, "fields": "files(id)"},
            headers=headers,
        )
        arquivos = _verificar_resposta(response).get("files", [])
        if arquivos:
            return arquivos[0]["id"]

        response = await client.post(
            DRIVE_FILES_URL,
            json={"name": empresa_nome, "mimeType": FOLDER_MIME, "parents": [self.folder_id]},
            headers=headers,
        )
        return _verificar_resposta(response)["id"]

    @_retry_transitorio
    async def _enviar(
        self,
        client: httpx.AsyncClient,
        headers: dict[str, str],
        nome_arquivo: str,
        conteudo: bytes,
        pasta_id: str,
    ) -> str:
        metadata = {"name": nome_arquivo, "parents": [pasta_id]}
        response = await client.post(
            DRIVE_UPLOAD_URL,
            headers=headers,
            files={
                "metadata": (None, json.dumps(metadata), "application/json; charset=UTF-8"),
                "file": (nome_arquivo, conteudo, "application/pdf"),
            },
        )
        return _verificar_resposta(response)["id"]

    async def upload_pdf(
        self,
        nome_arquivo: str,
        conteudo: bytes,
        empresa_nome: str,
    ) -> str:
        """
        Envia o PDF para a pasta da empresa.

        Returns:
            URL de visualização do arquivo no Drive

        Raises:
            UpstreamUnavailableError: Drive indisponível ou credenciais inválidas
        """
        if not self.habilitado:
            raise UpstreamUnavailableError("Google Drive", "integração não configurada")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                token = await self._access_token(client)
                headers = {"Authorization": f"Bearer {token}"}
                pasta_id = await self._pasta_da_empresa(client, headers, empresa_nome)
                file_id = await self._enviar(client, headers, nome_arquivo, conteudo, pasta_id)
        except (httpx.HTTPError, ErroTransitorioDrive, OSError, ValueError, KeyError) as e:
            logger.error("Erro no upload para o Google Drive", error=str(e))
            raise UpstreamUnavailableError("Google Drive", str(e))

        logger.info("Laudo espelhado no Google Drive", file_id=file_id, arquivo=nome_arquivo)
        return f"https://drive.google.com/file/d/{file_id}/view"

    async def baixar(self, url: str) -> bytes:
        """Baixa o PDF publicado para reenviar ao Drive."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError("Storage", f"falha ao baixar laudo: {e}")
