"""
Google Cloud Storage client.

Uses google-cloud-storage with Application Default Credentials, or an
explicit service account from GCS_CREDENTIALS_JSON (file path or inline JSON).

Public access is managed at bucket level (uniform bucket-level access),
so objects are written without ACLs and served from
https://storage.googleapis.com/{bucket}/{key}.
"""
import asyncio
import json
import logging
from typing import Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import DefaultCredentialsError, TransportError
from google.cloud import storage
from requests.exceptions import RequestException

from app.config import settings
from app.storage.base import StorageBackend, StorageBackendKind, StorageError, StoredObject

logger = logging.getLogger(__name__)


def _build_client() -> storage.Client:
    """Create a storage client from settings."""
    credentials = settings.gcs_credentials_json
    project = settings.gcs_project_id

    if credentials:
        # Inline JSON starts with '{', anything else is a file path
        if credentials.strip().startswith("{"):
            return storage.Client.from_service_account_info(
                json.loads(credentials), project=project
            )
        return storage.Client.from_service_account_json(credentials, project=project)

    return storage.Client(project=project)


class GCSStorage(StorageBackend):
    """
    Cloud object store backend.

    Fails gracefully if credentials are missing: the instance reports
    is_configured=False and the selector falls back to the blob store.
    """

    kind = StorageBackendKind.GCS

    def __init__(self, client: Optional[storage.Client] = None, bucket_name: Optional[str] = None):
        """
        Initialize the GCS backend.

        Args:
            client: Pre-built client (tests); built from settings when omitted
            bucket_name: Bucket override; defaults to GCS_BUCKET_NAME
        """
        self._bucket_name = bucket_name or settings.gcs_bucket_name
        self._client = client

        if not self._bucket_name:
            logger.warning("GCS storage not configured. Set GCS_BUCKET_NAME.")
            return

        if self._client is not None:
            return

        try:
            self._client = _build_client()
            logger.info(f"GCS client initialized for bucket: {self._bucket_name}")
        except DefaultCredentialsError:
            logger.warning("GCS credentials not found; cloud storage disabled")
        except (ValueError, OSError) as e:
            logger.error(f"Failed to initialize GCS client: {e}")

    @property
    def is_configured(self) -> bool:
        """Check if the bucket and client are both available."""
        return bool(self._bucket_name) and self._client is not None

    @property
    def bucket_name(self) -> Optional[str]:
        return self._bucket_name

    def public_url(self, key: str) -> str:
        base = settings.gcs_public_base_url.rstrip("/")
        return f"{base}/{self._bucket_name}/{key}"

    def _write(self, key: str, data: bytes, content_type: str) -> None:
        blob = self._client.bucket(self._bucket_name).blob(key)
        blob.cache_control = f"public, max-age={settings.upload_cache_max_age}"
        blob.upload_from_string(data, content_type=content_type)

    async def upload(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """
        Upload bytes to the bucket.

        The client library is blocking, so the write runs in a worker thread.
        """
        if not self.is_configured:
            raise StorageError("GCS storage is not configured")

        try:
            await asyncio.to_thread(self._write, key, data, content_type)
        except (GoogleAPIError, TransportError, RequestException) as e:
            raise StorageError(str(e)) from e

        return StoredObject(url=self.public_url(key), key=key, backend=self.kind)


# Singleton instance
_gcs_storage: Optional[GCSStorage] = None


def get_gcs_storage() -> GCSStorage:
    """
    Get the singleton GCS backend instance.

    Returns:
        GCSStorage instance (may or may not be configured)
    """
    global _gcs_storage
    if _gcs_storage is None:
        _gcs_storage = GCSStorage()
    return _gcs_storage


def reset_gcs_storage() -> None:
    """Drop the singleton so the next call rebuilds it from settings."""
    global _gcs_storage
    _gcs_storage = None
