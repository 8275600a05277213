import json

import httpx
import pytest
from botocore.exceptions import ClientError

from linkface.config.settings import Settings
from linkface.infrastructure.storage import (
    DriveStorageService,
    LocalStorageService,
    S3StorageService,
    StorageBackend,
    VercelBlobStorageService,
    create_storage_service,
)


# ── Local ──

def test_local_upload_and_read_back(tmp_path):
    storage = LocalStorageService(tmp_path / "uploads")
    result = storage.upload(b"photo-bytes", "abc_Maria_1.jpg", "image/jpeg")

    assert result.success is True
    assert result.path == str((tmp_path / "uploads" / "abc_Maria_1.jpg").resolve())
    assert result.file_id == result.path
    assert storage.read_photo(result.file_id, result.path) == b"photo-bytes"
    assert storage.get_photo_url(result.file_id, result.path) is None


@pytest.mark.parametrize("name", ["../escape.jpg", "sub/dir.jpg", "..", ""])
def test_local_rejects_names_with_path_parts(tmp_path, name):
    result = LocalStorageService(tmp_path).upload(b"x", name, "image/jpeg")
    assert result.success is False
    assert not (tmp_path.parent / "escape.jpg").exists()


def test_local_read_missing_file_returns_none(tmp_path):
    storage = LocalStorageService(tmp_path)
    assert storage.read_photo(None, str(tmp_path / "nope.jpg")) is None


# ── S3 ──

class FakeS3Client:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    def put_object(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {"ETag": '"abc"'}


def test_s3_upload_builds_public_url():
    client = FakeS3Client()
    storage = S3StorageService(bucket="fotos", region="sa-east-1", client=client)

    result = storage.upload(b"data", "a.png", "image/png")

    assert result.success is True
    assert result.file_id == "photos/a.png"
    assert result.url == "https://fotos.s3.sa-east-1.amazonaws.com/photos/a.png"
    assert client.calls[0]["ACL"] == "public-read"
    assert client.calls[0]["ContentType"] == "image/png"
    assert storage.get_photo_url(result.file_id) == result.url


def test_s3_client_error_becomes_failure():
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    storage = S3StorageService(bucket="fotos", client=FakeS3Client(error))
    result = storage.upload(b"data", "a.png", "image/png")
    assert result.success is False
    assert "AccessDenied" in result.error


def test_s3_without_bucket_fails_without_calling_client():
    client = FakeS3Client()
    result = S3StorageService(bucket="", client=client).upload(b"d", "a.png", "image/png")
    assert result.success is False
    assert client.calls == []


# ── Vercel Blob ──

def test_vercel_blob_upload_sends_token_and_returns_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["content_type"] = request.headers["x-content-type"]
        return httpx.Response(200, json={"url": "https://blob.example/a.webp"})

    storage = VercelBlobStorageService(
        token="blob-token",
        api_url="https://blob.test",
        transport=httpx.MockTransport(handler),
    )
    result = storage.upload(b"data", "a.webp", "image/webp")

    assert result.success is True
    assert result.url == result.file_id == "https://blob.example/a.webp"
    assert seen == {
        "method": "PUT",
        "url": "https://blob.test/a.webp",
        "auth": "Bearer blob-token",
        "content_type": "image/webp",
    }
    assert storage.get_photo_url(result.file_id) == result.url


def test_vercel_blob_http_error_becomes_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(403, text=json.dumps({"error": "forbidden"})))
    storage = VercelBlobStorageService(token="t", api_url="https://blob.test", transport=transport)
    result = storage.upload(b"data", "a.jpg", "image/jpeg")
    assert result.success is False


def test_vercel_blob_without_token_fails():
    assert VercelBlobStorageService(token="").upload(b"d", "a.jpg", "image/jpeg").success is False


# ── Google Drive ──

class FakeRequest:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def execute(self):
        if self._error:
            raise self._error
        return self._result


class FakeDriveFiles:
    def __init__(self, temp_dir, result=None, error=None):
        self.temp_dir = temp_dir
        self.result = result
        self.error = error
        self.bodies = []
        self.temp_files_during_upload = []

    def create(self, body, media_body, fields):
        self.bodies.append(body)
        self.temp_files_during_upload = list(self.temp_dir.iterdir())
        return FakeRequest(self.result, self.error)


class FakeDriveService:
    def __init__(self, files):
        self._files = files

    def files(self):
        return self._files


def test_drive_upload_removes_temp_file_on_success(tmp_path):
    files = FakeDriveFiles(tmp_path, result={"id": "drive-123"})
    storage = DriveStorageService("creds.json", "folder-1", tmp_path, service=FakeDriveService(files))

    result = storage.upload(b"data", "a.jpg", "image/jpeg")

    assert result.success is True
    assert result.file_id == "drive-123"
    assert result.url is None
    assert files.bodies == [{"name": "a.jpg", "parents": ["folder-1"]}]
    assert len(files.temp_files_during_upload) == 1
    assert list(tmp_path.iterdir()) == []


def test_drive_upload_removes_temp_file_on_failure(tmp_path):
    files = FakeDriveFiles(tmp_path, error=RuntimeError("quota exceeded"))
    storage = DriveStorageService("creds.json", "folder-1", tmp_path, service=FakeDriveService(files))

    result = storage.upload(b"data", "a.jpg", "image/jpeg")

    assert result.success is False
    assert "quota exceeded" in result.error
    assert len(files.temp_files_during_upload) == 1
    assert list(tmp_path.iterdir()) == []


def test_drive_without_credentials_fails(tmp_path):
    storage = DriveStorageService("", "", tmp_path / "temp")
    result = storage.upload(b"data", "a.jpg", "image/jpeg")
    assert result.success is False
    assert not (tmp_path / "temp").exists() or list((tmp_path / "temp").iterdir()) == []
    assert storage.supports_public_url is False


# ── Factory ──

@pytest.mark.parametrize(
    "storage_type, expected",
    [
        ("local", LocalStorageService),
        ("s3", S3StorageService),
        ("vercel-blob", VercelBlobStorageService),
        ("drive", DriveStorageService),
    ],
)
def test_factory_selects_backend(tmp_path, storage_type, expected):
    settings = Settings(_env_file=None, data_dir=str(tmp_path), storage_type=storage_type)
    storage = create_storage_service(settings)
    assert isinstance(storage, expected)
    assert storage.backend is StorageBackend(storage_type)


def test_vercel_blob_non_object_json_becomes_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=["not", "an", "object"]))
    storage = VercelBlobStorageService(token="t", api_url="https://blob.test", transport=transport)
    result = storage.upload(b"data", "a.jpg", "image/jpeg")
    assert result.success is False
    assert result.error == "Resposta do Vercel Blob sem URL"


class FailingDownloadFiles:
    def get_media(self, fileId):
        raise ConnectionError("network unreachable")


def test_drive_read_photo_transport_error_returns_none(tmp_path):
    storage = DriveStorageService(
        "creds.json", "folder-1", tmp_path, service=FakeDriveService(FailingDownloadFiles())
    )
    assert storage.read_photo("drive-123") is None


def test_drive_read_photo_with_malformed_credentials_returns_none(tmp_path):
    credentials = tmp_path / "service-account.json"
    credentials.write_text("not json")
    storage = DriveStorageService(str(credentials), "folder-1", tmp_path / "temp")
    assert storage.read_photo("drive-123") is None
