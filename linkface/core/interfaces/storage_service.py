"""
Contract: Storage Service

Gerencia upload das fotos em um dos backends suportados
(disco local, S3, Vercel Blob, Google Drive).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class StorageBackend(str, Enum):
    LOCAL = "local"
    S3 = "s3"
    VERCEL_BLOB = "vercel-blob"
    DRIVE = "drive"


@dataclass
class StorageResult:
    """Resultado de um upload. Nunca lança: falhas vêm com success=False."""
    success: bool
    url: str | None = None        # URL pública (S3, Vercel Blob)
    file_id: str | None = None    # chave / id no backend
    path: str | None = None       # caminho absoluto (local)
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> "StorageResult":
        return cls(success=False, error=error)


class IStorageService(ABC):
    """
    Port: Storage Service

    Cada implementação declara se as fotos têm URL pública
    (`supports_public_url`). Backends sem URL pública servem os bytes
    via `read_photo` no endpoint de fotos do painel.
    """

    backend: StorageBackend
    supports_public_url: bool = False

    @abstractmethod
    def upload(self, data: bytes, file_name: str, mime_type: str) -> StorageResult:
        """
        Faz upload de um arquivo.

        Args:
            data: Conteúdo em bytes.
            file_name: Nome já sanitizado.
            mime_type: MIME type declarado.

        Returns:
            StorageResult — nunca lança exceção.
        """
        ...

    def get_photo_url(self, file_id: str | None, path: str | None = None) -> str | None:
        """URL pública da foto, ou None quando o backend não expõe URLs."""
        return None

    def read_photo(self, file_id: str | None, path: str | None = None) -> bytes | None:
        """Bytes da foto para backends sem URL pública. None se não encontrada."""
        if path and Path(path).is_file():
            return Path(path).read_bytes()
        return None
