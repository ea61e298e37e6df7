"""
Service layer for business logic.
"""
from app.services.upload_service import (
    UploadService,
    UploadResult,
    UploadErrorKind,
    UploadValidationError,
)

__all__ = [
    "UploadService",
    "UploadResult",
    "UploadErrorKind",
    "UploadValidationError",
]
