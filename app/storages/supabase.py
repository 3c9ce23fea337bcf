from typing import Sequence
from urllib.parse import quote

import httpx
from loguru import logger

from app.storages.exceptions import ObjectExistsException, StorageException


class SupabaseStorage:
    """
    Supabase Storage bucket accessed through its REST API.
    """

    REQUEST_TIMEOUT = 60.0  # seconds

    def __init__(
        self,
        url: str,
        key: str,
        bucket: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.bucket = bucket
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.REQUEST_TIMEOUT),
            limits=httpx.Limits(
                max_keepalive_connections=20,
                max_connections=100,
                keepalive_expiry=300,
            ),
        )
        self._headers = {"Authorization": f"Bearer {key}", "apikey": key}

    async def close(self):
        """Close the http client."""
        if self._owns_client:
            await self._http_client.aclose()

    def _object_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/{self.bucket}/{quote(path.lstrip('/'))}"

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """
        Extract the backend's error message, falling back to the raw body.
        """
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)

    async def _request(self, method: str, url: str, headers: dict[str, str] | None = None, **kwargs) -> httpx.Response:
        try:
            return await self._http_client.request(method, url, headers={**self._headers, **(headers or {})}, **kwargs)
        except httpx.HTTPError as error:
            logger.error(f"Connection error during storage request: {error}")
            raise StorageException(f"Failed to connect to storage backend: {error}") from error

    async def put_object(
        self,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: int | None = None,
        overwrite: bool = False,
    ) -> str:
        headers = {
            "content-type": content_type,
            "x-upsert": "true" if overwrite else "false",
        }
        if cache_control is not None:
            headers["cache-control"] = f"max-age={cache_control}"

        response = await self._request("POST", self._object_url(path), content=content, headers=headers)
        if response.is_success:
            return path

        message = self._error_message(response)
        # Supabase reports an existing object either as 409 or as a 400 with "Duplicate"
        if response.status_code == 409 or "duplicate" in message.lower():
            raise ObjectExistsException(path=path)
        raise StorageException(message, status_code=response.status_code)

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{quote(path.lstrip('/'))}"

    async def delete_objects(self, paths: Sequence[str]) -> list[str]:
        response = await self._request(
            "DELETE",
            f"{self.url}/storage/v1/object/{self.bucket}",
            json={"prefixes": list(paths)},
        )
        if not response.is_success:
            raise StorageException(self._error_message(response), status_code=response.status_code)
        try:
            body = response.json()
        except ValueError as e:
            raise StorageException(f"Unexpected delete response: {response.text[:200]}") from e
        if not isinstance(body, list):
            raise StorageException(f"Unexpected delete response: {body}")
        return [item["name"] for item in body if isinstance(item, dict) and "name" in item]
