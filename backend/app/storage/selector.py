"""
Storage backend selection.
Picks the backend once per process based on environment configuration.
"""
import logging
from typing import Optional

from app.config import settings
from app.storage.base import StorageBackend
from app.storage.blob_client import VercelBlobStorage, get_blob_storage
from app.storage.gcs_client import GCSStorage, get_gcs_storage

logger = logging.getLogger(__name__)


def select_storage_backend(
    gcs: Optional[GCSStorage] = None,
    blob: Optional[VercelBlobStorage] = None
) -> Optional[StorageBackend]:
    """
    Choose the storage backend from configuration.

    Selection rules:
    - GCS_BUCKET_NAME set and a working GCS client → GCSStorage
    - otherwise BLOB_READ_WRITE_TOKEN set → VercelBlobStorage
    - otherwise None (uploads answer with a configuration error)

    Args:
        gcs: GCS backend to consider (defaults to the singleton)
        blob: Blob backend to consider (defaults to the singleton)

    Returns:
        Selected backend, or None when nothing is configured
    """
    if settings.gcs_bucket_name:
        gcs = gcs or get_gcs_storage()
        if gcs.is_configured:
            logger.info(f"Using GCS storage backend (bucket: {gcs.bucket_name})")
            return gcs
        logger.warning("GCS_BUCKET_NAME is set but no GCS client is available")

    if settings.blob_read_write_token:
        blob = blob or get_blob_storage()
        if blob.is_configured:
            logger.info("Using Vercel Blob storage backend")
            return blob

    logger.error("No storage backend configured: set GCS_BUCKET_NAME or BLOB_READ_WRITE_TOKEN")
    return None


# Cached selection
_selected: Optional[StorageBackend] = None
_resolved = False


def get_storage_backend() -> Optional[StorageBackend]:
    """
    FastAPI dependency returning the process-wide backend.

    The selection is made on first use and reused afterwards.
    """
    global _selected, _resolved
    if not _resolved:
        _selected = select_storage_backend()
        _resolved = True
    return _selected


def reset_storage_backend() -> None:
    """Forget the cached selection."""
    global _selected, _resolved
    _selected = None
    _resolved = False
