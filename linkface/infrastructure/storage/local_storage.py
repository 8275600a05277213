"""
Adapter: Local Storage — grava as fotos em DATA_DIR/uploads.
"""

import logging
from pathlib import Path

from linkface.core.interfaces.storage_service import IStorageService, StorageBackend, StorageResult

logger = logging.getLogger(__name__)


class LocalStorageService(IStorageService):
    """Armazenamento em disco. Fotos servidas pelo endpoint do painel."""

    backend = StorageBackend.LOCAL
    supports_public_url = False

    def __init__(self, uploads_dir: str | Path):
        self._uploads_dir = Path(uploads_dir)

    def upload(self, data: bytes, file_name: str, mime_type: str) -> StorageResult:
        if not file_name or Path(file_name).name != file_name or file_name in (".", ".."):
            return StorageResult.failure(f"Nome de arquivo inválido: {file_name!r}")
        try:
            self._uploads_dir.mkdir(parents=True, exist_ok=True)
            file_path = (self._uploads_dir / file_name).resolve()
            file_path.write_bytes(data)
        except OSError as e:
            logger.error(f"Local upload failed for {file_name}: {e}")
            return StorageResult.failure(str(e) or "Erro ao salvar arquivo localmente")

        return StorageResult(success=True, path=str(file_path), file_id=str(file_path))
