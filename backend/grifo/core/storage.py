"""
Serviço de armazenamento no Google Cloud Storage.

Fotos e laudos ficam em ``{empresa_id}/{vistoria_id}/{fotos|relatorios}/``.
"""

import uuid
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import BinaryIO

import structlog
from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError

from grifo.core.config import settings
from grifo.core.exceptions import (
    FileTooLargeError,
    FileUploadError,
    InvalidFileTypeError,
    StorageError,
)

logger = structlog.get_logger()


class CategoriaArquivo(str, Enum):
    FOTO = "fotos"
    RELATORIO = "relatorios"


TIPOS_PERMITIDOS: dict[CategoriaArquivo, list[str]] = {
    CategoriaArquivo.FOTO: settings.ALLOWED_PHOTO_TYPES,
    CategoriaArquivo.RELATORIO: settings.ALLOWED_REPORT_TYPES,
}


def gerar_caminho(
    empresa_id: uuid.UUID,
    vistoria_id: uuid.UUID,
    categoria: CategoriaArquivo,
    original_filename: str,
) -> str:
    """
    Gera path único no bucket.

    Formato: {empresa_id}/{vistoria_id}/{fotos|relatorios}/{uuid8}_{filename}
    """
    file_uuid = str(uuid.uuid4())[:8]
    safe_filename = Path(original_filename).name  # Remove path traversal
    return f"{empresa_id}/{vistoria_id}/{categoria.value}/{file_uuid}_{safe_filename}"


def validar_arquivo(file_size: int, mime_type: str, categoria: CategoriaArquivo) -> None:
    """Valida tamanho e tipo antes do upload."""
    max_size_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if file_size > max_size_bytes:
        raise FileTooLargeError(
            max_size_mb=settings.MAX_UPLOAD_SIZE_MB,
            actual_size_mb=file_size / (1024 * 1024),
        )

    permitidos = TIPOS_PERMITIDOS[categoria]
    if mime_type not in permitidos:
        raise InvalidFileTypeError(mime_type=mime_type, allowed_types=permitidos)


class StorageService:
    """
    Serviço de armazenamento no Google Cloud Storage.

    Uso:
        service = StorageService()
        path = await service.upload_file(conteudo, "sala.jpg", "image/jpeg",
                                         empresa_id, vistoria_id, CategoriaArquivo.FOTO)
    """

    def __init__(self):
        self._client: storage.Client | None = None
        self._bucket: storage.Bucket | None = None

    @property
    def client(self) -> storage.Client:
        """Inicializa cliente GCS sob demanda."""
        if self._client is None:
            self._client = storage.Client(project=settings.GCP_PROJECT_ID or None)
        return self._client

    @property
    def bucket(self) -> storage.Bucket:
        if self._bucket is None:
            self._bucket = self.client.bucket(settings.GCS_BUCKET_VISTORIAS)
        return self._bucket

    async def upload_file(
        self,
        file_content: bytes | BinaryIO,
        original_filename: str,
        mime_type: str,
        empresa_id: uuid.UUID,
        vistoria_id: uuid.UUID,
        categoria: CategoriaArquivo,
    ) -> str:
        """
        Faz upload de arquivo para o GCS.

        Returns:
            Caminho do objeto no bucket
        """
        if hasattr(file_content, "read"):
            content = file_content.read()
        else:
            content = file_content

        validar_arquivo(len(content), mime_type, categoria)
        gcs_path = gerar_caminho(empresa_id, vistoria_id, categoria, original_filename)

        try:
            blob = self.bucket.blob(gcs_path)
            blob.upload_from_string(content, content_type=mime_type)
        except GoogleCloudError as e:
            logger.error("Erro no upload para GCS", error=str(e), gcs_path=gcs_path)
            raise FileUploadError(f"Erro ao enviar arquivo: {str(e)}")

        logger.info(
            "Arquivo enviado para GCS",
            gcs_path=gcs_path,
            size_bytes=len(content),
            mime_type=mime_type,
        )
        return gcs_path

    async def download_file(self, gcs_path: str) -> bytes:
        try:
            blob = self.bucket.blob(gcs_path)
            return blob.download_as_bytes()
        except GoogleCloudError as e:
            logger.error("Erro no download do GCS", error=str(e), gcs_path=gcs_path)
            raise StorageError(f"Erro ao baixar arquivo: {str(e)}", operation="download")

    async def list_files(
        self,
        empresa_id: uuid.UUID,
        vistoria_id: uuid.UUID,
        categoria: CategoriaArquivo | None = None,
    ) -> list[str]:
        """Lista os caminhos de uma vistoria (opcionalmente de uma categoria)."""
        prefix = f"{empresa_id}/{vistoria_id}/"
        if categoria is not None:
            prefix += f"{categoria.value}/"
        try:
            return [blob.name for blob in self.client.list_blobs(self.bucket, prefix=prefix)]
        except GoogleCloudError as e:
            logger.error("Erro ao listar no GCS", error=str(e), prefix=prefix)
            raise StorageError(f"Erro ao listar arquivos: {str(e)}", operation="list")

    def generate_signed_url(
        self,
        gcs_path: str,
        expiration_minutes: int | None = None,
    ) -> str:
        """URL assinada (v4) para leitura do objeto."""
        try:
            blob = self.bucket.blob(gcs_path)
            return blob.generate_signed_url(
                version="v4",
                expiration=timedelta(
                    minutes=expiration_minutes or settings.SIGNED_URL_EXPIRE_MINUTES
                ),
                method="GET",
            )
        except GoogleCloudError as e:
            logger.error("Erro ao gerar URL assinada", error=str(e), gcs_path=gcs_path)
            raise StorageError(f"Erro ao gerar URL: {str(e)}", operation="signed_url")

    def public_url(self, gcs_path: str) -> str:
        return f"https://storage.googleapis.com/{settings.GCS_BUCKET_VISTORIAS}/{gcs_path}"

    async def delete_file(self, gcs_path: str) -> bool:
        try:
            self.bucket.blob(gcs_path).delete()
        except GoogleCloudError as e:
            logger.error("Erro ao remover do GCS", error=str(e), gcs_path=gcs_path)
            raise StorageError(f"Erro ao remover arquivo: {str(e)}", operation="delete")
        logger.info("Arquivo removido do GCS", gcs_path=gcs_path)
        return True


# Singleton para uso global
storage_service = StorageService()
