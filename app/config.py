from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./app.db"

    # Frontend URL for CORS (admin panel)
    frontend_url: str = "http://localhost:3000"

    # Logging level for the app loggers (DEBUG, INFO, WARNING, ...)
    log_level: str = "INFO"

    # Object storage: "local" (files under storage_dir) or "s3" (S3 / R2 / MinIO)
    storage_backend: str = "local"

    # Local storage root (empty = backend/uploads/storage)
    storage_dir: str = ""

    # Base URL used to build public URLs for local storage (served under /storage)
    public_base_url: str = "http://localhost:8001"

    # S3-compatible storage
    s3_endpoint_url: str = ""  # empty = AWS default endpoint
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_region: str = "auto"
    s3_public_url: str = ""  # public host for buckets, e.g. https://cdn.example.com

    # Buckets
    hero_images_bucket: str = "hero-images"
    qr_codes_bucket: str = "qr-codes"

    # Cache-Control max-age for hero images (seconds)
    hero_cache_control_seconds: int = 3600

    # QR code image upload limit (5 MB)
    qr_max_upload_bytes: int = 5 * 1024 * 1024

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
