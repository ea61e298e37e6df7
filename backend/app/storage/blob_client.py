"""
Vercel Blob client.

Fallback backend for local development without cloud credentials.
Talks to the Vercel Blob HTTP API with a read-write token:

    PUT {BLOB_API_URL}/{pathname}
    authorization: Bearer <BLOB_READ_WRITE_TOKEN>

The response carries the store-issued public URL.
"""
import logging
from typing import Optional

import httpx

from app.config import settings
from app.storage.base import StorageBackend, StorageBackendKind, StorageError, StoredObject

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


class VercelBlobStorage(StorageBackend):
    """Managed blob store backend."""

    kind = StorageBackendKind.VERCEL_BLOB

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the blob backend.

        Args:
            token: Read-write token; defaults to BLOB_READ_WRITE_TOKEN
            api_url: API base URL; defaults to BLOB_API_URL
            http_client: Shared AsyncClient (tests); created lazily when omitted
        """
        self._token = token or settings.blob_read_write_token
        self._api_url = (api_url or settings.blob_api_url).rstrip("/")
        self._http_client = http_client

        if not self._token:
            logger.warning("Vercel Blob not configured. Set BLOB_READ_WRITE_TOKEN.")

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        return self._http_client

    def _headers(self, content_type: str) -> dict:
        return {
            "authorization": f"Bearer {self._token}",
            "x-api-version": settings.blob_api_version,
            "x-content-type": content_type,
            "x-cache-control-max-age": str(settings.upload_cache_max_age),
            "x-add-random-suffix": "0",
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Extract the API error message, falling back to the status line."""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return f"Vercel Blob error ({response.status_code}): {error['message']}"
        return f"Vercel Blob error ({response.status_code}): {response.reason_phrase}"

    async def upload(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """PUT the object and return the store-issued URL."""
        if not self.is_configured:
            raise StorageError("Vercel Blob storage is not configured")

        try:
            response = await self.http_client.put(
                f"{self._api_url}/{key}",
                content=data,
                headers=self._headers(content_type),
            )
        except httpx.HTTPError as e:
            raise StorageError(f"Vercel Blob request failed: {e}") from e

        if response.is_error:
            raise StorageError(self._error_message(response))

        try:
            url = response.json()["url"]
        except (ValueError, KeyError) as e:
            raise StorageError("Vercel Blob response did not include a URL") from e

        return StoredObject(url=url, key=key, backend=self.kind)

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created one."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


# Singleton instance
_blob_storage: Optional[VercelBlobStorage] = None


def get_blob_storage() -> VercelBlobStorage:
    """
    Get the singleton Vercel Blob backend instance.

    Returns:
        VercelBlobStorage instance (may or may not be configured)
    """
    global _blob_storage
    if _blob_storage is None:
        _blob_storage = VercelBlobStorage()
    return _blob_storage


async def close_blob_storage() -> None:
    """Close and drop the singleton (application shutdown)."""
    global _blob_storage
    if _blob_storage is not None:
        await _blob_storage.close()
        _blob_storage = None
