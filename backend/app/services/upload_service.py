"""
Upload service.

Handles the business logic of the image upload endpoint:
1. Validate the request (file present, type, size, directory)
2. Sanitize the filename and build the object key
3. Write to the selected storage backend with a fixed retry budget

Object keys follow {directory}/{unix-timestamp-ms}-{sanitized-filename}.
"""
import enum
import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

from app.config import settings
from app.storage.base import StorageBackend, StorageBackendKind, StorageNotConfiguredError
from app.storage.retry import retry_upload
from app.utils.metrics import (
    upload_attempts_total,
    upload_bytes,
    upload_duration_seconds,
    uploads_total,
)

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = (
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/webp',
    'image/avif',
)

ALLOWED_DIRECTORIES = (
    'courses',
    'batches',
    'general',
    'products',
    'products/banner',
    'category-icons',
    'logos',
)

DEFAULT_DIRECTORY = 'general'

_WHITESPACE_RE = re.compile(r'\s+')
_DISALLOWED_CHARS_RE = re.compile(r'[^a-zA-Z0-9.-]')


class UploadErrorKind(str, enum.Enum):
    """Validation failure reasons."""
    MISSING_FILE = "MissingFile"
    INVALID_TYPE = "InvalidType"
    TOO_LARGE = "TooLarge"
    INVALID_DIRECTORY = "InvalidDirectory"


class UploadValidationError(Exception):
    """Client-caused rejection. Never retried, mapped to 400."""

    def __init__(self, kind: UploadErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""
    url: str
    key: str
    backend: StorageBackendKind


class UploadService:
    """
    Service for handling image uploads.

    Responsibilities:
    - Validate upload requests
    - Generate object keys
    - Delegate writes to the storage backend
    """

    @staticmethod
    def validate(
        has_file: bool,
        content_type: Optional[str],
        size: Optional[int],
        directory: str
    ) -> None:
        """
        Validate an upload request. Checks run in a fixed order and the
        first failing check wins.

        Args:
            has_file: Whether the request carried a file
            content_type: Declared MIME type
            size: Size in bytes
            directory: Target directory

        Raises:
            UploadValidationError: On the first failed check
        """
        if not has_file:
            raise UploadValidationError(UploadErrorKind.MISSING_FILE, 'No file provided')

        if content_type not in ALLOWED_CONTENT_TYPES:
            raise UploadValidationError(
                UploadErrorKind.INVALID_TYPE,
                'Invalid file type. Only JPEG, PNG, WebP, and AVIF images are allowed.'
            )

        if size is not None and size > settings.upload_max_bytes:
            max_mb = settings.upload_max_bytes // (1024 * 1024)
            raise UploadValidationError(
                UploadErrorKind.TOO_LARGE,
                f'File too large. Maximum size is {max_mb}MB.'
            )

        if directory not in ALLOWED_DIRECTORIES:
            raise UploadValidationError(
                UploadErrorKind.INVALID_DIRECTORY,
                f"Invalid directory. Allowed directories: {', '.join(ALLOWED_DIRECTORIES)}"
            )

    @staticmethod
    def sanitize_filename(file_name: str) -> str:
        """
        Make a filename safe for object keys.

        Whitespace runs become hyphens, anything outside [a-zA-Z0-9.-]
        is dropped, and the result is lowercased.
        """
        sanitized = _WHITESPACE_RE.sub('-', file_name)
        sanitized = _DISALLOWED_CHARS_RE.sub('', sanitized)
        return sanitized.lower()

    @staticmethod
    def build_object_key(directory: str, file_name: str, timestamp_ms: Optional[int] = None) -> str:
        """
        Build the object key for an upload.

        Pattern: {directory}/{unix-timestamp-ms}-{sanitized-filename}

        Args:
            directory: Validated target directory
            file_name: Original filename
            timestamp_ms: Millisecond timestamp (defaults to now)

        Returns:
            Object key string
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return f"{directory}/{timestamp_ms}-{UploadService.sanitize_filename(file_name)}"

    @staticmethod
    async def upload(
        backend: Optional[StorageBackend],
        data: bytes,
        file_name: str,
        content_type: str,
        directory: str
    ) -> UploadResult:
        """
        Write a validated upload to storage.

        Args:
            backend: Selected storage backend (None if nothing is configured)
            data: File bytes
            file_name: Original filename
            content_type: Validated MIME type
            directory: Validated directory

        Returns:
            UploadResult with public URL, key and backend

        Raises:
            StorageNotConfiguredError: If no backend is available
            Exception: The last backend error after all attempts failed
        """
        if backend is None:
            raise StorageNotConfiguredError("Server configuration error: no storage backend configured")

        key = UploadService.build_object_key(directory, file_name)
        storage_label = backend.kind.value
        logger.info(f"Generated object key: {key}", extra={"object_key": key, "storage": storage_label})

        async def attempt():
            try:
                stored = await backend.upload(key, data, content_type)
            except Exception:
                upload_attempts_total.labels(storage=storage_label, outcome="failure").inc()
                raise
            upload_attempts_total.labels(storage=storage_label, outcome="success").inc()
            return stored

        start_time = time.time()
        try:
            stored = await retry_upload(
                attempt,
                attempts=settings.upload_retry_attempts,
                delay_seconds=settings.upload_retry_delay_seconds
            )
        except Exception:
            uploads_total.labels(storage=storage_label, status="failed").inc()
            raise
        finally:
            upload_duration_seconds.labels(storage=storage_label).observe(time.time() - start_time)

        uploads_total.labels(storage=storage_label, status="success").inc()
        upload_bytes.observe(len(data))

        return UploadResult(url=stored.url, key=stored.key, backend=stored.backend)
