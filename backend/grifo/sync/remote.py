"""
Cliente HTTP da API usado pela fila de sincronização.

Traduz as respostas da API para a hierarquia de exceções do Grifo:

- 401 -> AuthenticationError (interrompe a drenagem)
- 408, 429, 5xx e falhas de rede -> UpstreamUnavailableError (retentável)
- demais 4xx -> ValidationError (terminal para o item)
"""

from typing import Any
from uuid import UUID

import httpx
import structlog

from grifo.core.config import settings
from grifo.core.exceptions import (
    AuthenticationError,
    UpstreamUnavailableError,
    ValidationError,
)

logger = structlog.get_logger()

STATUS_RETENTAVEIS = {408, 429}


def _mensagem_erro(response: httpx.Response) -> str:
    try:
        corpo = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(corpo, dict):
        erro = corpo.get("error")
        if isinstance(erro, dict) and erro.get("message"):
            return erro["message"]
        if "detail" in corpo:
            return str(corpo["detail"])
    return f"HTTP {response.status_code}"


class ClienteRemoto:
    """Chamadas da fila à API v1 em nome do vistoriador."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout or settings.SYNC_TIMEOUT_SEGUNDOS
        self._transport = transport

    def atualizar_token(self, token: str) -> None:
        """Troca o token depois de um novo login."""
        self._token = token

    async def _request(
        self,
        method: str,
        path: str,
        idempotency_key: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._token}"}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError("api", str(e) or type(e).__name__)

        if response.status_code == 401:
            raise AuthenticationError(_mensagem_erro(response))
        if response.status_code in STATUS_RETENTAVEIS or response.status_code >= 500:
            raise UpstreamUnavailableError(
                "api", f"HTTP {response.status_code}: {_mensagem_erro(response)}"
            )
        if response.status_code >= 400:
            raise ValidationError(
                _mensagem_erro(response),
                errors=[{"status_code": response.status_code}],
            )

        return response.json()["data"]

    async def criar_vistoria(
        self,
        payload: dict[str, Any],
        idempotency_key: str,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/vistorias",
            idempotency_key=idempotency_key,
            json={**payload, "idempotency_key": idempotency_key},
        )

    async def criar_ambiente(
        self,
        vistoria_id: UUID,
        payload: dict[str, Any],
        idempotency_key: str,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/vistorias/{vistoria_id}/ambientes",
            idempotency_key=idempotency_key,
            json={**payload, "idempotency_key": idempotency_key},
        )

    async def enviar_foto(
        self,
        vistoria_id: UUID,
        conteudo: bytes,
        filename: str,
        content_type: str,
        idempotency_key: str,
        ambiente_id: UUID | None = None,
        legenda: str | None = None,
        ordem: int = 0,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {"ordem": str(ordem), "idempotency_key": idempotency_key}
        if ambiente_id:
            data["ambiente_id"] = str(ambiente_id)
        if legenda:
            data["legenda"] = legenda

        return await self._request(
            "POST",
            f"/vistorias/{vistoria_id}/fotos",
            idempotency_key=idempotency_key,
            data=data,
            files={"file": (filename, conteudo, content_type)},
        )

    async def enviar_laudo(
        self,
        vistoria_id: UUID,
        conteudo: bytes,
        filename: str,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/vistorias/{vistoria_id}/laudo",
            files={"file": (filename, conteudo, "application/pdf")},
        )

    async def finalizar(self, vistoria_id: UUID, pdf_url: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/vistorias/{vistoria_id}/finalizar",
            json={"pdf_url": pdf_url},
        )
