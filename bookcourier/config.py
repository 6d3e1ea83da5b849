"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from bookcourier.core.utils import split_csv


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: str = "*"

    # ==========================================================================
    # Database
    # ==========================================================================

    # "memory" keeps everything in-process; "mongo" uses DB_URI / DB_NAME
    storage_backend: str = "memory"
    db_uri: str = ""
    db_name: str = "bookCourier"

    # ==========================================================================
    # Identity provider (Firebase)
    # ==========================================================================

    # Service-account JSON: path on disk, or the whole file base64-encoded
    fb_service_key: str = ""
    fb_service_key_b64: str = ""
    # Overrides the project id found in the service account
    firebase_project_id: str = ""

    # ==========================================================================
    # Roles
    # ==========================================================================

    admin_emails: str = ""
    librarian_emails: str = ""
    roles_file: str = ""

    # Only librarians and admins may add books when set
    restrict_book_creation: bool = False

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    stripe_secret: str = ""
    payment_currency: str = Field("usd", min_length=3, max_length=3)
    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return split_csv(self.cors_origins)

    @property
    def admin_emails_list(self) -> list[str]:
        return split_csv(self.admin_emails)

    @property
    def librarian_emails_list(self) -> list[str]:
        return split_csv(self.librarian_emails)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_firebase_credential(self) -> bool:
        return bool(self.fb_service_key or self.fb_service_key_b64 or self.firebase_project_id)

    @property
    def use_mongo(self) -> bool:
        return self.storage_backend == "mongo"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
