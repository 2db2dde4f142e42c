"""
Brainshelf configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Database (only needed by the Postgres-backed store and identity provider)
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DATABASE_POOL_MIN_SIZE: int = int(os.environ.get("DATABASE_POOL_MIN_SIZE", "1"))
    DATABASE_POOL_MAX_SIZE: int = int(os.environ.get("DATABASE_POOL_MAX_SIZE", "10"))

    # Change notifications for the entries table
    ENTRIES_CHANNEL: str = os.environ.get("ENTRIES_CHANNEL", "entries_changed")

    # Identity tokens
    IDENTITY_TOKEN_SECRET: str = os.environ.get("IDENTITY_TOKEN_SECRET", "")
    IDENTITY_TOKEN_ALGORITHM: str = "HS256"
    IDENTITY_TOKEN_EXPIRY_HOURS: int = 24 * 30

    # How long a login waits for the provider to report the new identity
    IDENTITY_RESOLVE_TIMEOUT_SECONDS: float = float(os.environ.get("IDENTITY_RESOLVE_TIMEOUT_SECONDS", "10"))

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


# Singleton instance
settings = Settings()

if not settings.IDENTITY_TOKEN_SECRET:
    raise RuntimeError("IDENTITY_TOKEN_SECRET environment variable is required")
