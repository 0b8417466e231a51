"""
Configuration and settings for the gallery backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected)
    database_url: Optional[str] = Field(default=None)
    database_pool_size: int = Field(default=5)
    database_max_overflow: int = Field(default=10)

    # Firebase Storage through the GCS S3-interoperability endpoint
    storage_bucket: Optional[str] = Field(default=None)
    storage_endpoint: str = Field(default="https://storage.googleapis.com")
    storage_region: str = Field(default="auto")
    storage_access_key_id: Optional[str] = Field(default=None)
    storage_secret_access_key: Optional[str] = Field(default=None)
    compressed_key_prefix: str = Field(default="compressed_")

    # Session tokens issued by the auth provider
    jwt_secret: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")
    session_cookie_name: str = Field(default="session_token")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Queue (Redis) for background pointer refreshes
    redis_url: Optional[str] = Field(default=None)
    redis_queue_key: str = Field(default="snapper:pointer-refresh")
    refresh_workers: int = Field(default=4, ge=1)

    # Page sizes per listing endpoint
    group_images_page_size: int = Field(default=100, ge=1)
    album_images_page_size: int = Field(default=50, ge=1)
    person_images_page_size: int = Field(default=10, ge=1)

    # Signed URL windows in seconds, per call site
    group_images_url_ttl: int = Field(default=24 * 60 * 60)
    person_images_url_ttl: int = Field(default=8 * 60 * 60)
    album_images_url_ttl: int = Field(default=24 * 60 * 60)
    similar_images_url_ttl: int = Field(default=24 * 60 * 60)
    download_url_ttl: int = Field(default=15 * 60)
    url_expiry_margin: int = Field(default=10 * 60)
    url_refresh_threshold: int = Field(default=15 * 60)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
