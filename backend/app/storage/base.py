"""
Base class for storage backends.
All backends must implement this interface so the upload flow can write
to either store without knowing which one is active.
"""
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass


class StorageBackendKind(str, enum.Enum):
    """Closed set of supported storage backends."""
    GCS = "gcs"
    VERCEL_BLOB = "vercel-blob"


class StorageError(Exception):
    """Raised when a backend write fails."""
    pass


class StorageNotConfiguredError(StorageError):
    """Raised when no backend is usable with the current configuration."""
    pass


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful backend write."""
    url: str
    key: str
    backend: StorageBackendKind


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Backends are constructed once per process and shared across requests.
    """

    kind: StorageBackendKind

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the backend has what it needs to accept writes."""
        pass

    @abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """
        Write one object.

        Args:
            key: Object key (path in bucket)
            data: Raw file bytes
            content_type: MIME type stored with the object

        Returns:
            StoredObject with the public URL

        Raises:
            StorageError: If the write fails
        """
        pass
