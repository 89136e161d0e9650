"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API can start without any configuration in development.  In a
production deployment ``JWT_SECRET`` must be overridden; the
application logs a warning on startup when the default secret is in
use.
"""

import os
from dataclasses import dataclass
from typing import List

DEFAULT_SECRET_KEY = "change_me"

DEFAULT_CORS_ORIGINS = ",".join(
    [
        "https://saveup-app.replit.dev",
        "https://saveup-app.replit.app",
        "http://localhost:5000",
        "http://localhost:3000",
    ]
)


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "SaveUp API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Tokens are signed with this secret.  ``JWT_SECRET`` takes
    # precedence; ``SECRET_KEY`` is accepted for compatibility with
    # older deployment manifests.
    secret_key: str = os.getenv("JWT_SECRET", os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY))
    # Seven days, matching the lifetime the mobile client expects.
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # ``sqlite`` uses the durable store with the in-process fallback,
    # ``memory`` keeps everything in process (tests, demos).
    storage_backend: str = os.getenv("STORAGE_BACKEND", "sqlite")

    # Path to the SQLite database file.  Relative paths are resolved
    # against the package root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "saveup.db")

    # Comma-separated list of origins allowed to call the API from a
    # browser.
    cors_origins: str = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def uses_default_secret(self) -> bool:
        return self.secret_key == DEFAULT_SECRET_KEY


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before this module is imported.
settings = Settings()
