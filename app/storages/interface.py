from typing import Protocol, Sequence


class ObjectStorage(Protocol):
    async def put_object(
        self,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: int | None = None,
        overwrite: bool = False,
    ) -> str:
        """
        Store `content` at `path` inside the bucket and return the stored path.
        With overwrite=False an existing object at `path` raises ObjectExistsException.
        Any other backend failure raises StorageException.
        """
        ...

    def public_url(self, path: str) -> str:
        """
        Return an absolute URL that the frontend can use to download or display the object.
        """
        ...

    async def delete_objects(self, paths: Sequence[str]) -> list[str]:
        """
        Remove the objects at `paths` and return the paths the backend reports as removed.
        Raises StorageException when the backend rejects the request.
        """
        ...

    async def close(self) -> None:
        """
        Release any connection held by the backend.
        """
        ...
