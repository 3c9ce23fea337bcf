"""Tests for the /v1/media endpoints."""
from pathlib import Path

from fastapi.testclient import TestClient

from app.core.config import MediaSettings, Settings
from app.main import create_app
from app.media.naming import StoragePathGenerator
from app.media.service import MediaUploadService
from app.storages.exceptions import StorageException
from app.storages.local import LocalStorage
from tests.conftest import FIXED_MILLIS, InMemoryStorage

BASE = "/api/v1/media"


# ---------------------------------------------------------------------------
# POST /media/{conversation_id}/
# ---------------------------------------------------------------------------


class TestUploadMediaMessage:
    def test_single_image(self, client: TestClient, storage: InMemoryStorage):
        resp = client.post(
            f"{BASE}/conv1/",
            files=[("files", ("photo.JPG", b"jpeg-bytes", "image/jpeg"))],
            data={"message_text": "  sunset  "},
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["conversation_id"] == "conv1"
        assert data["message_type"] == "image"
        assert data["message_text"] == "sunset"
        assert data["media_name"] == "photo.JPG"
        assert data["media_size"] == len(b"jpeg-bytes")
        assert data["media_url"].endswith(f"image/conv1/{FIXED_MILLIS}_token1.JPG")
        assert data["metadata"] == {}
        assert list(storage.objects) == [f"image/conv1/{FIXED_MILLIS}_token1.JPG"]

    def test_several_files_make_a_media_group(self, client: TestClient):
        resp = client.post(
            f"{BASE}/conv1/",
            files=[
                ("files", ("a.png", b"png", "image/png")),
                ("files", ("song.mp3", b"mp3", "audio/mpeg")),
                ("files", ("clip.mp4", b"mp4", "video/mp4")),
            ],
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["message_type"] == "media_group"
        assert data["message_text"] == "3 files"
        media_files = data["metadata"]["mediaFiles"]
        assert [f["category"] for f in media_files] == ["image", "audio", "video"]
        assert media_files[2]["thumbnailUrl"] is not None

    def test_invalid_file_blocks_the_whole_message(self, client: TestClient, storage: InMemoryStorage):
        resp = client.post(
            f"{BASE}/conv1/",
            files=[
                ("files", ("a.png", b"png", "image/png")),
                ("files", ("tool.exe", b"MZ", "application/x-msdownload")),
            ],
        )

        assert resp.status_code == 400
        detail = resp.json()["detail"][0]
        assert detail["type"] == "validation_error"
        assert detail["loc"] == ["body", "files"]
        assert detail["context"] == [{"name": "tool.exe", "errors": ["File type not supported"]}]
        assert storage.put_calls == []

    def test_oversized_upload_is_rejected_before_storage(
        self, storage: InMemoryStorage, path_generator: StoragePathGenerator
    ):
        service = MediaUploadService(
            storage=storage, settings=MediaSettings(MAX_FILE_SIZE=16), path_generator=path_generator
        )

        with TestClient(create_app(settings=Settings(), media_service=service)) as client:
            resp = client.post(f"{BASE}/conv1/", files=[("files", ("big.png", b"x" * 4096, "image/png"))])

        assert resp.status_code == 400
        rejection = resp.json()["detail"][0]["context"][0]
        assert rejection["name"] == "big.png"
        assert rejection["errors"][0].startswith("File size must be less than")
        assert storage.put_calls == []

    def test_backend_failure_returns_502(self, client: TestClient, storage: InMemoryStorage):
        storage.put_errors.append(StorageException("Bucket not found", status_code=404))

        resp = client.post(f"{BASE}/conv1/", files=[("files", ("a.png", b"png", "image/png"))])

        assert resp.status_code == 502
        detail = resp.json()["detail"][0]
        assert detail["type"] == "upload_error"
        assert detail["message"] == "Failed to upload 1 file(s). Please try again."
        assert detail["context"][0]["name"] == "a.png"
        assert detail["context"][0]["error"] == "Upload failed: Bucket not found"


# ---------------------------------------------------------------------------
# POST /media/validate and /media/{conversation_id}/file
# ---------------------------------------------------------------------------


def test_validate_reports_each_file(client: TestClient, storage: InMemoryStorage):
    resp = client.post(
        f"{BASE}/validate",
        files=[
            ("files", ("a.pdf", b"%PDF", "application/pdf")),
            ("files", ("b.xyz", b"?", "application/x-unknown")),
        ],
    )

    assert resp.status_code == 200
    assert resp.json() == [
        {"name": "a.pdf", "is_valid": True, "errors": []},
        {"name": "b.xyz", "is_valid": False, "errors": ["File type not supported"]},
    ]
    assert storage.put_calls == []


class TestUploadSingleFile:
    def test_success(self, client: TestClient):
        resp = client.post(f"{BASE}/conv1/file", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["category"] == "file"
        assert body["data"]["path"] == f"file/conv1/{FIXED_MILLIS}_token1.txt"

    def test_video_gets_thumbnail(self, client: TestClient):
        resp = client.post(f"{BASE}/conv1/file", files={"file": ("clip.webm", b"webm", "video/webm")})

        assert resp.status_code == 201
        assert resp.json()["data"]["thumbnail_url"].endswith(f"image/conv1/{FIXED_MILLIS}_token2.jpg")

    def test_validation_failure(self, client: TestClient):
        resp = client.post(f"{BASE}/conv1/file", files={"file": ("x.bin", b"?", "application/x-unknown")})

        assert resp.status_code == 400
        assert resp.json()["error_type"] == "validation_error"

    def test_backend_failure(self, client: TestClient, storage: InMemoryStorage):
        storage.put_errors.append(StorageException("Internal error"))

        resp = client.post(f"{BASE}/conv1/file", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert resp.status_code == 502
        assert resp.json()["success"] is False


# ---------------------------------------------------------------------------
# /media/files/{path}
# ---------------------------------------------------------------------------


class TestFiles:
    def test_delete(self, client: TestClient, storage: InMemoryStorage):
        storage.objects["image/conv1/1_a.png"] = (b"png", "image/png")

        resp = client.delete(f"{BASE}/files/image/conv1/1_a.png")

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "deleted": ["image/conv1/1_a.png"], "error": None}

    def test_delete_failure(self, client: TestClient, storage: InMemoryStorage):
        storage.delete_error = StorageException("permission denied", status_code=403)

        resp = client.delete(f"{BASE}/files/image/conv1/1_a.png")

        assert resp.status_code == 502
        assert resp.json()["error"] == "Delete failed: permission denied"

    def test_serving_requires_local_storage(self, client: TestClient):
        resp = client.get(f"{BASE}/files/image/conv1/1_a.png")
        assert resp.status_code == 404

    def test_serves_local_files(self, tmp_path: Path, path_generator: StoragePathGenerator):
        storage = LocalStorage(base_path=tmp_path, base_url=f"http://testserver{BASE}/files")
        service = MediaUploadService(storage=storage, settings=MediaSettings(), path_generator=path_generator)

        with TestClient(create_app(settings=Settings(), media_service=service)) as client:
            uploaded = client.post(f"{BASE}/conv1/file", files={"file": ("notes.txt", b"hello", "text/plain")})
            url = uploaded.json()["data"]["url"]

            resp = client.get(url)
            missing = client.get(f"{BASE}/files/file/conv1/missing.txt")

        assert resp.status_code == 200
        assert resp.content == b"hello"
        assert resp.headers["content-disposition"] == f"attachment; filename={FIXED_MILLIS}_token1.txt"
        assert missing.status_code == 404


def test_lifespan_closes_storage(service: MediaUploadService, storage: InMemoryStorage):
    with TestClient(create_app(settings=Settings(), media_service=service)):
        assert not storage.closed
    assert storage.closed
