"""Storage backends, selected by StorageBackend."""

from linkface.config.settings import Settings
from linkface.core.interfaces.storage_service import IStorageService, StorageBackend, StorageResult
from linkface.infrastructure.storage.drive_storage import DriveStorageService
from linkface.infrastructure.storage.local_storage import LocalStorageService
from linkface.infrastructure.storage.s3_storage import S3StorageService
from linkface.infrastructure.storage.vercel_blob_storage import VercelBlobStorageService


def _local(settings: Settings) -> IStorageService:
    return LocalStorageService(uploads_dir=settings.uploads_dir)


def _s3(settings: Settings) -> IStorageService:
    return S3StorageService(
        bucket=settings.aws_s3_bucket_name,
        region=settings.aws_region,
        access_key=settings.aws_access_key_id,
        secret_key=settings.aws_secret_access_key,
    )


def _vercel_blob(settings: Settings) -> IStorageService:
    return VercelBlobStorageService(token=settings.blob_read_write_token)


def _drive(settings: Settings) -> IStorageService:
    return DriveStorageService(
        credentials_path=settings.google_application_credentials,
        folder_id=settings.google_drive_folder_id,
        temp_dir=settings.temp_dir,
    )


_FACTORIES = {
    StorageBackend.LOCAL: _local,
    StorageBackend.S3: _s3,
    StorageBackend.VERCEL_BLOB: _vercel_blob,
    StorageBackend.DRIVE: _drive,
}


def create_storage_service(settings: Settings) -> IStorageService:
    """Instancia o backend configurado em STORAGE_TYPE."""
    return _FACTORIES[StorageBackend(settings.storage_type)](settings)


__all__ = [
    "IStorageService",
    "StorageBackend",
    "StorageResult",
    "LocalStorageService",
    "S3StorageService",
    "VercelBlobStorageService",
    "DriveStorageService",
    "create_storage_service",
]
