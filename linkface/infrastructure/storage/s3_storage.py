"""
Adapter: S3 Storage Service

Upload para AWS S3 (ou compatível) com ACL pública.
Chave: photos/<file_name>.
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from linkface.core.interfaces.storage_service import IStorageService, StorageBackend, StorageResult

logger = logging.getLogger(__name__)

KEY_PREFIX = "photos/"


class S3StorageService(IStorageService):
    """Storage em S3; devolve a URL pública derivada de bucket/região/chave."""

    backend = StorageBackend.S3
    supports_public_url = True

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        access_key: str = "",
        secret_key: str = "",
        client=None,
    ):
        self._bucket = bucket
        self._region = region
        self._access_key = access_key
        self._secret_key = secret_key
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self._region,
                aws_access_key_id=self._access_key or None,
                aws_secret_access_key=self._secret_key or None,
            )
        return self._client

    def public_url(self, key: str) -> str:
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    def upload(self, data: bytes, file_name: str, mime_type: str) -> StorageResult:
        if not self._bucket:
            return StorageResult.failure("AWS_S3_BUCKET_NAME não configurado")

        key = f"{KEY_PREFIX}{file_name}"
        try:
            self._get_client().put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=mime_type,
                ACL="public-read",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            return StorageResult.failure(str(e) or "Erro ao fazer upload para S3")

        return StorageResult(success=True, url=self.public_url(key), file_id=key)

    def get_photo_url(self, file_id: str | None, path: str | None = None) -> str | None:
        if not file_id:
            return None
        if file_id.startswith("https://"):
            return file_id
        return self.public_url(file_id)
