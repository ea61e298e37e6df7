"""
Application configuration using Pydantic Settings.
All environment variables are loaded here with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"

    # Google Cloud Storage (primary backend)
    gcs_bucket_name: Optional[str] = None
    gcs_project_id: Optional[str] = None
    gcs_credentials_json: Optional[str] = None  # Path to JSON file or JSON string
    gcs_public_base_url: str = "https://storage.googleapis.com"

    # Vercel Blob (fallback backend for local development)
    blob_read_write_token: Optional[str] = None
    blob_api_url: str = "https://blob.vercel-storage.com"
    blob_api_version: str = "7"

    # Upload policy
    upload_max_bytes: int = 15 * 1024 * 1024  # 15MB
    upload_retry_attempts: int = 3  # Total attempts, not retries
    upload_retry_delay_seconds: float = 1.0
    upload_cache_max_age: int = 31536000  # 1 year

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
