"""
Pydantic schemas for API request/response validation.
"""
from app.schemas.upload import (
    UploadResponse,
    ErrorResponse,
)

__all__ = [
    "UploadResponse",
    "ErrorResponse",
]
