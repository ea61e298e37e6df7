"""
FastAPI application entry point.
Sets up the API with lifespan events for logging and storage initialization.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from app.config import settings
from app.api.router import api_router
from app.middleware.metrics_middleware import MetricsMiddleware
from app.storage.blob_client import close_blob_storage
from app.storage.selector import get_storage_backend
from app.utils.logging import configure_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "catalog-admin-api"
VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Configure logging and select the storage backend
    - Shutdown: Close the blob store HTTP client
    """
    configure_logging(SERVICE_NAME, settings.log_level)

    backend = get_storage_backend()
    if backend is None and settings.environment == "production":
        logger.error("Starting without a storage backend; uploads will fail")

    yield

    await close_blob_storage()


app = FastAPI(
    title="Catalog Admin API",
    description="Image upload API for the catalog admin (products, coupons, categories)",
    version=VERSION,
    lifespan=lifespan
)

# CORS middleware (admin UI is served from another origin)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Catalog Admin API",
        "version": VERSION,
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
