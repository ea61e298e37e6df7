"""
Tests for service layer business logic.
"""
import re

import pytest

from app.config import settings
from app.services.upload_service import (
    ALLOWED_DIRECTORIES,
    UploadErrorKind,
    UploadService,
    UploadValidationError,
)
from app.storage.base import StorageBackendKind, StorageNotConfiguredError


class TestSanitizeFilename:
    """Tests for UploadService.sanitize_filename."""

    @pytest.mark.parametrize("raw, expected", [
        ("photo.png", "photo.png"),
        ("My Photo.PNG", "my-photo.png"),
        ("a   b\tc.jpg", "a-b-c.jpg"),
        ("summer_sale (final)!.webp", "summersale-final.webp"),
        ("café-menu.avif", "caf-menu.avif"),
        ("../../etc/passwd", "....etcpasswd"),
        ("", ""),
    ])
    def test_sanitize(self, raw, expected):
        assert UploadService.sanitize_filename(raw) == expected

    @pytest.mark.parametrize("raw", [
        "My Photo (1).PNG",
        "  leading and trailing  .jpg",
        "Ünïcödé näme.png",
        "already-clean.png",
        "tabs\tand\nnewlines.webp",
    ])
    def test_sanitize_is_idempotent(self, raw):
        once = UploadService.sanitize_filename(raw)
        assert UploadService.sanitize_filename(once) == once

    def test_sanitized_charset(self):
        result = UploadService.sanitize_filename("Wêird  Ñame #1 (copy).JPG")
        assert re.fullmatch(r"[a-z0-9.-]*", result)


class TestBuildObjectKey:
    """Tests for UploadService.build_object_key."""

    def test_key_format(self):
        key = UploadService.build_object_key("products", "Red Shoe.png", timestamp_ms=1718000000123)
        assert key == "products/1718000000123-red-shoe.png"

    def test_nested_directory(self):
        key = UploadService.build_object_key("products/banner", "hero.webp", timestamp_ms=1)
        assert key == "products/banner/1-hero.webp"

    def test_default_timestamp_is_milliseconds(self):
        key = UploadService.build_object_key("general", "a.png")
        assert re.fullmatch(r"general/\d{13}-a\.png", key)


class TestValidate:
    """Tests for UploadService.validate."""

    def test_valid_request(self):
        UploadService.validate(True, "image/png", 100, "general")

    @pytest.mark.parametrize("directory", ALLOWED_DIRECTORIES)
    def test_every_allowed_directory(self, directory):
        UploadService.validate(True, "image/jpeg", 1, directory)

    def test_missing_file_wins(self):
        with pytest.raises(UploadValidationError) as exc_info:
            UploadService.validate(False, None, None, "nope")
        assert exc_info.value.kind == UploadErrorKind.MISSING_FILE

    def test_invalid_type(self):
        with pytest.raises(UploadValidationError) as exc_info:
            UploadService.validate(True, "image/gif", 1, "general")
        assert exc_info.value.kind == UploadErrorKind.INVALID_TYPE

    def test_missing_type_is_invalid(self):
        with pytest.raises(UploadValidationError) as exc_info:
            UploadService.validate(True, None, 1, "general")
        assert exc_info.value.kind == UploadErrorKind.INVALID_TYPE

    def test_too_large(self):
        with pytest.raises(UploadValidationError) as exc_info:
            UploadService.validate(True, "image/png", settings.upload_max_bytes + 1, "general")
        assert exc_info.value.kind == UploadErrorKind.TOO_LARGE
        assert exc_info.value.message == "File too large. Maximum size is 15MB."

    def test_size_at_limit(self):
        UploadService.validate(True, "image/png", settings.upload_max_bytes, "general")

    def test_invalid_directory(self):
        with pytest.raises(UploadValidationError) as exc_info:
            UploadService.validate(True, "image/png", 1, "coupons")
        assert exc_info.value.kind == UploadErrorKind.INVALID_DIRECTORY
        assert "products/banner" in exc_info.value.message


class TestUpload:
    """Tests for UploadService.upload."""

    @pytest.mark.asyncio
    async def test_upload_success(self, fake_backend):
        result = await UploadService.upload(
            backend=fake_backend,
            data=b"img",
            file_name="Logo Final.png",
            content_type="image/png",
            directory="logos"
        )

        assert re.fullmatch(r"logos/\d{13}-logo-final\.png", result.key)
        assert result.url.endswith(result.key)
        assert result.backend == StorageBackendKind.GCS
        assert fake_backend.calls == [(result.key, b"img", "image/png")]

    @pytest.mark.asyncio
    async def test_upload_without_backend(self):
        with pytest.raises(StorageNotConfiguredError):
            await UploadService.upload(
                backend=None,
                data=b"img",
                file_name="a.png",
                content_type="image/png",
                directory="general"
            )

    @pytest.mark.asyncio
    async def test_upload_retries_until_success(self, backend_factory):
        backend = backend_factory(failures=2)

        result = await UploadService.upload(backend, b"img", "a.png", "image/png", "general")

        assert len(backend.calls) == 3
        assert result.key == backend.calls[-1][0]

    @pytest.mark.asyncio
    async def test_upload_raises_last_error(self, backend_factory):
        backend = backend_factory(failures=3)

        with pytest.raises(Exception, match="transient failure 3"):
            await UploadService.upload(backend, b"img", "a.png", "image/png", "general")

        assert len(backend.calls) == 3

    @pytest.mark.asyncio
    async def test_attempt_budget_from_settings(self, backend_factory, monkeypatch):
        monkeypatch.setattr(settings, "upload_retry_attempts", 1)
        backend = backend_factory(failures=1)

        with pytest.raises(Exception, match="transient failure 1"):
            await UploadService.upload(backend, b"img", "a.png", "image/png", "general")

        assert len(backend.calls) == 1
