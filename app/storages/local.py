import contextlib
from pathlib import Path
from typing import AsyncGenerator, Sequence

import aiofiles
import aiofiles.os

from app.storages.exceptions import ObjectExistsException, StorageException

CHUNK_SIZE = 1024 * 1024  # 1 MB


class LocalStorage:
    def __init__(self, base_path: Path, base_url: str) -> None:
        """
        Initialize the local storage backend.
        Example: base_path = Path("/uploads"), base_url = "http://localhost:8000/api/v1/media/files"
        """
        self.base_path = base_path
        self.base_url = base_url.rstrip("/")

    def resolve_path(self, path: str) -> Path:
        """
        Map a bucket path (e.g. 'image/conv1/1700000000000_abc.jpg') onto the filesystem.
        Paths escaping the base directory are rejected.
        """
        base = self.base_path.resolve()
        destination = base.joinpath(*[part for part in path.split("/") if part]).resolve()
        if destination == base or base not in destination.parents:
            raise StorageException(f"Invalid object path '{path}'", status_code=400)
        return destination

    async def put_object(
        self,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: int | None = None,
        overwrite: bool = False,
    ) -> str:
        """
        Writes the object in chunks. Content type and cache control are not persisted locally.
        """
        destination = self.resolve_path(path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageException(f"Failed to create directory for '{path}': {e}") from e
        # "x" fails when the file exists, which keeps the write non-overwriting
        mode = "wb" if overwrite else "xb"
        try:
            async with aiofiles.open(destination, mode) as out_file:
                for start in range(0, len(content), CHUNK_SIZE):
                    await out_file.write(content[start : start + CHUNK_SIZE])
        except FileExistsError as e:
            raise ObjectExistsException(path=path) from e
        except OSError as e:
            # Drop the partial file so a failed write leaves nothing behind
            with contextlib.suppress(OSError):
                destination.unlink(missing_ok=True)
            raise StorageException(f"Failed to write '{path}': {e}") from e
        return path

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def delete_objects(self, paths: Sequence[str]) -> list[str]:
        """
        Removes the given objects. Missing objects are skipped, matching the remote backend.
        """
        deleted: list[str] = []
        for path in paths:
            target = self.resolve_path(path)
            try:
                await aiofiles.os.remove(target)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageException(f"Failed to delete '{path}': {e}") from e
            deleted.append(path)
        return deleted

    async def get_object(self, path: str) -> AsyncGenerator[bytes, None]:
        """
        Retrieves an object as an asynchronous generator of chunks.
        Intended for use by a router to stream the file to the client.
        """
        file_path = self.resolve_path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Object '{path}' not found.")

        async def file_iterator() -> AsyncGenerator[bytes, None]:
            async with aiofiles.open(file_path, mode="rb") as f:
                while True:
                    chunk = await f.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk

        return file_iterator()

    async def close(self) -> None:
        return None
