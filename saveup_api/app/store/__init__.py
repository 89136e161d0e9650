"""
Resource store package.

``build_store`` picks the storage strategy from the settings once at
startup.  The resulting instance is owned by the application
(``app.state.store``) and handed to request handlers through
dependency injection.
"""

import logging

from .base import ResourceStore, parse_decimal, parse_int, sanitize_user, utcnow
from .fallback import FallbackStore
from .memory import MemoryStore
from .sqlite import SQLiteStore

logger = logging.getLogger(__name__)

__all__ = [
    "FallbackStore",
    "MemoryStore",
    "ResourceStore",
    "SQLiteStore",
    "build_store",
    "parse_decimal",
    "parse_int",
    "sanitize_user",
    "utcnow",
]


def build_store(settings) -> ResourceStore:
    """Create the store configured by ``settings.storage_backend``.

    ``memory`` gives a bare in-process store; anything else gives the
    SQLite store wrapped with an in-process fallback.
    """
    backend = (settings.storage_backend or "sqlite").lower()
    if backend == "memory":
        logger.info("Using in-process memory store")
        return MemoryStore()
    if backend != "sqlite":
        logger.warning("Unknown STORAGE_BACKEND %r, using sqlite", settings.storage_backend)
    logger.info("Using SQLite store with in-process fallback")
    return FallbackStore(SQLiteStore(), MemoryStore())
