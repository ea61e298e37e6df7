"""
Storage module for image uploads.

Two backends sit behind one interface:
- Google Cloud Storage (primary, needs GCS_BUCKET_NAME and credentials)
- Vercel Blob (fallback for local development, needs BLOB_READ_WRITE_TOKEN)
"""
from app.storage.base import (
    StorageBackend,
    StorageBackendKind,
    StorageError,
    StorageNotConfiguredError,
    StoredObject,
)
from app.storage.blob_client import VercelBlobStorage, get_blob_storage
from app.storage.gcs_client import GCSStorage, get_gcs_storage
from app.storage.retry import retry_upload
from app.storage.selector import get_storage_backend, select_storage_backend

__all__ = [
    "StorageBackend",
    "StorageBackendKind",
    "StorageError",
    "StorageNotConfiguredError",
    "StoredObject",
    "VercelBlobStorage",
    "get_blob_storage",
    "GCSStorage",
    "get_gcs_storage",
    "retry_upload",
    "get_storage_backend",
    "select_storage_backend",
]
