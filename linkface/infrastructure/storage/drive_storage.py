"""
Adapter: Google Drive Storage

Grava um arquivo temporário, envia para a pasta configurada no Drive
(conta de serviço, escopo drive.file) e remove o temporário em todos
os caminhos de saída. Drive não expõe URL pública: as fotos são
baixadas pelo id e servidas pelo endpoint do painel.
"""

import io
import logging
import uuid
from pathlib import Path

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from linkface.core.interfaces.storage_service import IStorageService, StorageBackend, StorageResult

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.file"]


class DriveStorageService(IStorageService):
    """Storage em uma pasta do Google Drive."""

    backend = StorageBackend.DRIVE
    supports_public_url = False

    def __init__(
        self,
        credentials_path: str,
        folder_id: str,
        temp_dir: str | Path,
        service=None,
    ):
        self._credentials_path = credentials_path
        self._folder_id = folder_id
        self._temp_dir = Path(temp_dir)
        self._service = service

    def _get_service(self):
        """Cliente Drive v3, ou None se credenciais/pasta não estiverem configuradas."""
        if self._service is not None:
            return self._service
        if not self._credentials_path or not self._folder_id:
            return None
        if not Path(self._credentials_path).is_file():
            logger.warning(f"Drive credentials not found: {self._credentials_path}")
            return None
        credentials = service_account.Credentials.from_service_account_file(
            self._credentials_path, scopes=DRIVE_SCOPES
        )
        self._service = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return self._service

    def upload(self, data: bytes, file_name: str, mime_type: str) -> StorageResult:
        temp_path = self._temp_dir / f"{uuid.uuid4().hex}_{file_name}"
        try:
            service = self._get_service()
            if service is None:
                return StorageResult.failure("Falha ao fazer upload para Google Drive")

            self._temp_dir.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(data)

            with temp_path.open("rb") as fh:
                media = MediaIoBaseUpload(fh, mimetype=mime_type, resumable=False)
                created = service.files().create(
                    body={"name": file_name, "parents": [self._folder_id]},
                    media_body=media,
                    fields="id",
                ).execute()

            file_id = (created or {}).get("id")
            if not file_id:
                return StorageResult.failure("Falha ao fazer upload para Google Drive")
            return StorageResult(success=True, file_id=file_id)
        except Exception as e:
            logger.error(f"Drive upload failed for {file_name}: {e}")
            return StorageResult.failure(str(e) or "Erro ao fazer upload para Google Drive")
        finally:
            temp_path.unlink(missing_ok=True)

    def read_photo(self, file_id: str | None, path: str | None = None) -> bytes | None:
        if not file_id:
            return None
        try:
            service = self._get_service()
            if service is None:
                return None
            request = service.files().get_media(fileId=file_id)
            buffer = io.BytesIO()
            downloader = MediaIoBaseDownload(buffer, request)
            done = False
            while not done:
                _, done = downloader.next_chunk()
            return buffer.getvalue()
        except Exception as e:
            logger.warning(f"Drive download failed for {file_id}: {e}")
            return None
