"""
Image upload endpoint.

POST /upload accepts a multipart form with:
- file: the image (JPEG, PNG, WebP or AVIF, up to 15MB)
- directory: target folder, defaults to "general"

The image is written to the configured storage backend (GCS, or Vercel Blob
when no bucket is configured) and its public URL is returned.

The form is read from the request directly; a text value in place of the
file is rejected as an invalid type with the usual {error} body.
"""
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from app.schemas.upload import ErrorResponse, UploadResponse
from app.services.upload_service import (
    DEFAULT_DIRECTORY,
    UploadService,
    UploadValidationError,
)
from app.storage.base import StorageBackend, StorageNotConfiguredError
from app.storage.selector import get_storage_backend
from app.utils.logging import (
    log_upload_completed,
    log_upload_failed,
    log_upload_received,
    log_upload_rejected,
)
from app.utils.metrics import upload_rejections_total

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _directory_field(value) -> str:
    """Empty or missing means the default; a non-text value can never match the allow-list."""
    if value is None or value == "":
        return DEFAULT_DIRECTORY
    if not isinstance(value, str):
        return ""
    return value


@router.post(
    "",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Configuration or storage failure"},
    },
)
async def upload_file(
    request: Request,
    backend: Optional[StorageBackend] = Depends(get_storage_backend)
):
    """
    Upload an image to object storage.

    Flow:
    1. Validate file presence, type, size and directory (400 on failure)
    2. Build object key {directory}/{timestamp-ms}-{sanitized-name}
    3. Write to storage, retrying transient failures
    4. Return public URL, object key and backend name
    """
    start_time = time.time()

    async with request.form() as form:
        raw_file = form.get("file")
        directory = _directory_field(form.get("directory"))

        # A text value in the file field counts as a file of unknown type
        upload = raw_file if isinstance(raw_file, UploadFile) else None
        has_file = upload is not None or bool(raw_file)

        context = {
            "file_name": upload.filename if upload else None,
            "file_size": upload.size if upload else None,
            "content_type": upload.content_type if upload else None,
            "directory": directory,
        }
        log_upload_received(logger, **context)

        try:
            UploadService.validate(
                has_file=has_file,
                content_type=context["content_type"],
                size=context["file_size"],
                directory=directory
            )
        except UploadValidationError as e:
            upload_rejections_total.labels(reason=e.kind.value).inc()
            log_upload_rejected(logger, reason=e.kind.value, message=e.message, **context)
            return _error_response(status.HTTP_400_BAD_REQUEST, e.message)

        # Only read the bytes once the request is known to be acceptable
        data = await upload.read()

    try:
        result = await UploadService.upload(
            backend=backend,
            data=data,
            file_name=upload.filename or "",
            content_type=upload.content_type,
            directory=directory
        )
    except StorageNotConfiguredError as e:
        log_upload_failed(logger, error=str(e), include_traceback=False, **context)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        log_upload_failed(logger, error=str(e) or type(e).__name__, duration_ms=duration_ms, **context)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to upload file",
            details=str(e) or type(e).__name__
        )

    duration_ms = (time.time() - start_time) * 1000
    log_upload_completed(
        logger,
        object_key=result.key,
        storage=result.backend.value,
        url=result.url,
        duration_ms=duration_ms
    )

    return UploadResponse(url=result.url, file_name=result.key, storage=result.backend)
