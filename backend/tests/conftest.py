"""
Test configuration and fixtures.
Storage backends are replaced with in-memory fakes; no cloud access needed.
"""
import os

# Set test environment before any imports
os.environ["ENVIRONMENT"] = "test"
os.environ["UPLOAD_RETRY_DELAY_SECONDS"] = "0"
os.environ.pop("GCS_BUCKET_NAME", None)
os.environ.pop("GCS_CREDENTIALS_JSON", None)
os.environ.pop("BLOB_READ_WRITE_TOKEN", None)

import pytest
from typing import AsyncGenerator, Callable, List, Optional, Tuple

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.storage.base import StorageBackend, StorageBackendKind, StorageError, StoredObject


class FakeStorageBackend(StorageBackend):
    """
    Recording backend.

    Fails the first `failures` writes with StorageError, then succeeds.
    """

    kind = StorageBackendKind.GCS

    def __init__(self, failures: int = 0, bucket: str = "test-bucket"):
        self.failures = failures
        self.bucket = bucket
        self.calls: List[Tuple[str, bytes, str]] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def upload(self, key: str, data: bytes, content_type: str) -> StoredObject:
        self.calls.append((key, data, content_type))
        if len(self.calls) <= self.failures:
            raise StorageError(f"transient failure {len(self.calls)}")
        return StoredObject(
            url=f"https://storage.googleapis.com/{self.bucket}/{key}",
            key=key,
            backend=self.kind
        )


@pytest.fixture(autouse=True)
def reset_storage_singletons():
    """Make every test start without cached backends."""
    from app.storage import gcs_client, blob_client, selector

    selector.reset_storage_backend()
    gcs_client.reset_gcs_storage()
    blob_client._blob_storage = None
    yield
    selector.reset_storage_backend()
    gcs_client.reset_gcs_storage()
    blob_client._blob_storage = None


@pytest.fixture
def fake_backend() -> FakeStorageBackend:
    """Backend that always succeeds."""
    return FakeStorageBackend()


@pytest.fixture
def backend_factory() -> Callable[..., FakeStorageBackend]:
    """Build fake backends with a chosen number of leading failures."""
    return FakeStorageBackend


def get_test_app(backend: Optional[StorageBackend]) -> FastAPI:
    """Create a test FastAPI app with the storage dependency overridden."""
    from app.main import app
    from app.storage.selector import get_storage_backend

    app.dependency_overrides[get_storage_backend] = lambda: backend

    return app


@pytest.fixture
def make_client() -> Callable:
    """
    Factory fixture returning an async context manager bound to a backend.

    Usage:
        async with make_client(backend) as client:
            ...
    """
    from contextlib import asynccontextmanager

    @asynccontextmanager
    async def _make(backend: Optional[StorageBackend]) -> AsyncGenerator[AsyncClient, None]:
        app = get_test_app(backend)
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return _make


@pytest.fixture
async def client(make_client, fake_backend: FakeStorageBackend) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client wired to the fake backend."""
    async with make_client(fake_backend) as ac:
        yield ac
