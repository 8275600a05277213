"""
Adapter: Vercel Blob Storage

Upload via API HTTP do Vercel Blob (PUT /<pathname>) usando httpx.
A URL pública devolvida pelo serviço é usada como url e file_id.
"""

import logging

import httpx

from linkface.core.interfaces.storage_service import IStorageService, StorageBackend, StorageResult

logger = logging.getLogger(__name__)

BLOB_API_URL = "https://blob.vercel-storage.com"
BLOB_API_VERSION = "7"


class VercelBlobStorageService(IStorageService):
    """Storage gerenciado (Vercel Blob), acesso público."""

    backend = StorageBackend.VERCEL_BLOB
    supports_public_url = True

    def __init__(
        self,
        token: str,
        api_url: str = BLOB_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def upload(self, data: bytes, file_name: str, mime_type: str) -> StorageResult:
        if not self._token:
            return StorageResult.failure("BLOB_READ_WRITE_TOKEN não configurado")

        headers = {
            "authorization": f"Bearer {self._token}",
            "x-api-version": BLOB_API_VERSION,
            "x-content-type": mime_type,
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.put(f"{self._api_url}/{file_name}", content=data, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Vercel Blob upload failed for {file_name}: {e}")
            return StorageResult.failure(str(e) or "Erro ao fazer upload para Vercel Blob")

        url = payload.get("url") if isinstance(payload, dict) else None
        if not isinstance(url, str) or not url:
            return StorageResult.failure("Resposta do Vercel Blob sem URL")
        return StorageResult(success=True, url=url, file_id=url)

    def get_photo_url(self, file_id: str | None, path: str | None = None) -> str | None:
        return file_id or None
