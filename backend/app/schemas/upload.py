"""
Pydantic schemas for the upload endpoint.
"""
from pydantic import BaseModel, Field
from typing import Optional

from app.storage.base import StorageBackendKind


class UploadResponse(BaseModel):
    """Schema for a successful upload."""
    url: str = Field(..., description="Public URL of the stored image")
    file_name: str = Field(..., alias="fileName", description="Object key in the storage backend")
    storage: StorageBackendKind = Field(..., description="Backend that stored the object")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "url": "https://storage.googleapis.com/catalog-media/products/1718000000000-red-shoe.png",
                "fileName": "products/1718000000000-red-shoe.png",
                "storage": "gcs"
            }
        }


class ErrorResponse(BaseModel):
    """Schema for upload errors."""
    error: str = Field(..., description="Human-readable error")
    details: Optional[str] = Field(None, description="Underlying error message for server failures")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Failed to upload file",
                "details": "503 Service Unavailable"
            }
        }
