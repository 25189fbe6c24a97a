"""
Configuration management for the FastAPI application.
Uses Pydantic Settings for environment variable management.
"""
from pathlib import Path
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Bakery Storefront API"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "Backend API for the bakery storefront gallery, orders and admin panel"

    # CORS Configuration
    # For development, you can use ["*"] to allow all origins (not recommended for production)
    CORS_ORIGINS: List[str] = ["*"]

    # Storage Configuration
    # DATA_FILE and CACHE_FILE are resolved relative to DATA_DIR unless absolute
    DATA_DIR: Path = Path("data")
    DATA_FILE: str = "store.json"
    CACHE_FILE: str = "session_cache.json"
    UPLOAD_DIR: Path = Path("uploads")
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_IMAGE_TYPES: List[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "image/gif",
    ]

    # Retention and expiry
    CACHE_TTL_MINUTES: int = 15
    SWEEP_INTERVAL_MINUTES: int = 30
    ANALYTICS_MEMORY_LIMIT: int = 10000
    ANALYTICS_PERSIST_LIMIT: int = 5000

    # Admin credentials
    # Should be bcrypt hashed password (see generate_password_hash.py)
    ADMIN_USERNAME: str = "bakery_admin"
    ADMIN_PASSWORD_HASH: str = ""

    # JWT Configuration
    # SECRET_KEY should be a long random string (e.g., generated with: openssl rand -hex 32)
    # IMPORTANT: Keep this secret and use a strong, unique value in production
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production-use-openssl-rand-hex-32"
    # Token lifetime and admin session max age share this value
    SESSION_MAX_AGE_MINUTES: int = 120
    LOGIN_RATE_LIMIT: str = "5 per 15 minutes"

    # Outbound mail (optional, notifications are skipped when SMTP_HOST is empty)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    NOTIFY_EMAIL: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def data_path(self) -> Path:
        return self._resolve(self.DATA_FILE)

    @property
    def cache_path(self) -> Path:
        return self._resolve(self.CACHE_FILE)

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def _resolve(self, name: str) -> Path:
        path = Path(name)
        return path if path.is_absolute() else self.DATA_DIR / path


# Global settings instance
settings = Settings()
