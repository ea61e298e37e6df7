"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- file_name
- file_size
- content_type
- directory
- storage
- duration_ms

Usage:
    from app.utils.logging import configure_logging, log_upload_completed

    configure_logging('catalog-admin-api', 'INFO')
    log_upload_completed(logger, object_key='products/1-a.png', storage='gcs', duration_ms=45.2)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    file_name: Optional[str] = None,
    file_size: Optional[int] = None,
    content_type: Optional[str] = None,
    directory: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        file_name: Original file name as sent by the client
        file_size: Declared size in bytes
        content_type: Declared MIME type
        directory: Target directory
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if file_name is not None:
        extra["file_name"] = file_name
    if file_size is not None:
        extra["file_size"] = file_size
    if content_type is not None:
        extra["content_type"] = content_type
    if directory is not None:
        extra["directory"] = directory
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


def log_upload_received(
    logger: logging.Logger,
    file_name: Optional[str],
    file_size: Optional[int],
    content_type: Optional[str],
    directory: Optional[str],
    **kwargs
):
    """Log an incoming upload request before validation."""
    extra = _build_log_extra(
        event="upload_received",
        file_name=file_name,
        file_size=file_size,
        content_type=content_type,
        directory=directory,
        **kwargs
    )
    logger.info(f"Upload received: {file_name}", extra=extra)


def log_upload_rejected(
    logger: logging.Logger,
    reason: str,
    message: str,
    file_name: Optional[str] = None,
    file_size: Optional[int] = None,
    content_type: Optional[str] = None,
    directory: Optional[str] = None,
    **kwargs
):
    """
    Log an upload rejected by validation.

    Args:
        logger: Logger instance
        reason: Error kind (MissingFile, InvalidType, TooLarge, InvalidDirectory)
        message: Client-facing error message
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_rejected",
        file_name=file_name,
        file_size=file_size,
        content_type=content_type,
        directory=directory,
        reason=reason,
        **kwargs
    )
    logger.warning(f"Upload rejected ({reason}): {message}", extra=extra)


def log_upload_retry(
    logger: logging.Logger,
    attempt: int,
    retries_left: int,
    error: str,
    **kwargs
):
    """Log a failed write attempt that will or will not be retried."""
    extra = _build_log_extra(
        event="upload_attempt_failed",
        attempt=attempt,
        retries_left=retries_left,
        error=str(error),
        **kwargs
    )
    logger.warning(
        f"Upload attempt {attempt} failed, {retries_left} retries left: {error}",
        extra=extra
    )


def log_upload_completed(
    logger: logging.Logger,
    object_key: str,
    storage: str,
    url: str,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log a successful upload.

    Args:
        logger: Logger instance
        object_key: Stored object key (required)
        storage: Backend identifier (gcs or vercel-blob)
        url: Public URL of the stored object
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_completed",
        duration_ms=duration_ms,
        object_key=object_key,
        storage=storage,
        url=url,
        **kwargs
    )
    logger.info(f"Upload successful: {url}", extra=extra)


def log_upload_failed(
    logger: logging.Logger,
    error: str,
    file_name: Optional[str] = None,
    file_size: Optional[int] = None,
    content_type: Optional[str] = None,
    directory: Optional[str] = None,
    duration_ms: Optional[float] = None,
    include_traceback: bool = True,
    **kwargs
):
    """
    Log an upload that failed after validation passed.

    Args:
        logger: Logger instance
        error: Error message
        include_traceback: Whether to include stack trace (default: True for errors)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_failed",
        file_name=file_name,
        file_size=file_size,
        content_type=content_type,
        directory=directory,
        duration_ms=duration_ms,
        error=str(error),
        **kwargs
    )

    message = f"Error uploading file: {error}"

    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
        else:
            logger.error(message, extra=extra)
    else:
        logger.error(message, extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
