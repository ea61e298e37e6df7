"""
Health check endpoint.
Reports which storage backend uploads will be written to.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.storage.base import StorageBackend
from app.storage.selector import get_storage_backend

router = APIRouter()


@router.get("")
async def health_check(backend: Optional[StorageBackend] = Depends(get_storage_backend)):
    """
    Health check endpoint.
    Returns 503 when no storage backend is configured.
    """
    health_status = {
        "status": "healthy",
        "storage": backend.kind.value if backend is not None else "unconfigured"
    }

    if backend is None:
        health_status["status"] = "unhealthy"
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
