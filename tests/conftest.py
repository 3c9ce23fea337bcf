"""Shared test fixtures for the chat media service."""
from typing import Generator, Sequence

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from app.core.config import MediaSettings, Settings
from app.main import create_app
from app.media.naming import StoragePathGenerator
from app.media.schemas import UploadCandidate
from app.media.service import MediaUploadService
from app.storages.exceptions import ObjectExistsException, StorageException

MB = 1024 * 1024
FIXED_MILLIS = 1700000000000


class InMemoryStorage:
    """Object store fake that records every call."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.put_calls: list[dict] = []
        self.delete_calls: list[list[str]] = []
        self.put_errors: list[StorageException] = []
        self.delete_error: StorageException | None = None
        self.closed = False

    async def put_object(
        self,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: int | None = None,
        overwrite: bool = False,
    ) -> str:
        self.put_calls.append(
            {"path": path, "content_type": content_type, "cache_control": cache_control, "overwrite": overwrite}
        )
        if self.put_errors:
            raise self.put_errors.pop(0)
        if path in self.objects and not overwrite:
            raise ObjectExistsException(path=path)
        self.objects[path] = (content, content_type)
        return path

    def public_url(self, path: str) -> str:
        return f"https://storage.test/public/chat-media/{path}"

    async def delete_objects(self, paths: Sequence[str]) -> list[str]:
        self.delete_calls.append(list(paths))
        if self.delete_error:
            raise self.delete_error
        deleted = [path for path in paths if path in self.objects]
        for path in deleted:
            del self.objects[path]
        return deleted

    async def close(self) -> None:
        self.closed = True


class StaticFrameExtractor:
    def __init__(self, image: bytes = b"\xff\xd8thumbnail") -> None:
        self.image = image
        self.calls: list[float] = []

    async def extract_still_frame(self, video: bytes, offset_seconds: float) -> bytes:
        self.calls.append(offset_seconds)
        return self.image


class FailingFrameExtractor:
    async def extract_still_frame(self, video: bytes, offset_seconds: float) -> bytes:
        raise RuntimeError("decoder crashed")


def make_candidate(
    name: str = "photo.jpg",
    content_type: str = "image/jpeg",
    size: int | None = None,
    content: bytes = b"data",
) -> UploadCandidate:
    return UploadCandidate(
        name=name,
        content_type=content_type,
        size=len(content) if size is None else size,
        content=content,
    )


class SequentialTokens:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"token{self.count}"


@pytest.fixture
def media_settings() -> MediaSettings:
    return MediaSettings()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def path_generator() -> StoragePathGenerator:
    return StoragePathGenerator(clock=lambda: FIXED_MILLIS, token_factory=SequentialTokens())


@pytest.fixture
def frame_extractor() -> StaticFrameExtractor:
    return StaticFrameExtractor()


@pytest.fixture
def service(
    storage: InMemoryStorage,
    media_settings: MediaSettings,
    path_generator: StoragePathGenerator,
    frame_extractor: StaticFrameExtractor,
) -> MediaUploadService:
    return MediaUploadService(
        storage=storage,
        settings=media_settings,
        path_generator=path_generator,
        frame_extractor=frame_extractor,
    )


@pytest.fixture
def client(service: MediaUploadService) -> Generator[TestClient, None, None]:
    app = create_app(settings=Settings(), media_service=service)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """Collect loguru output as "LEVEL: message" strings."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(f"{message.record['level'].name}: {message.record['message']}"),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
