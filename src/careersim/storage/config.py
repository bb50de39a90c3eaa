"""Storage configuration for CareerSim.

This module selects the session storage backend and builds repository
instances from environment configuration.
"""

import os
from enum import Enum

from .memory_repo import InMemorySessionRepository
from .repository import SessionRepository
from .sqlite_repo import SQLiteSessionRepository


class StorageBackend(Enum):
    """Available storage backends."""

    MEMORY = "memory"
    SQLITE = "sqlite"


# Default configuration (can be overridden via environment variables)
DEFAULT_STORAGE_BACKEND = StorageBackend.MEMORY
DEFAULT_DATABASE_URI = "instance/careersim.db"


def get_storage_backend() -> StorageBackend:
    """Get configured storage backend from environment.

    Returns:
        StorageBackend enum value
    """
    backend_str = os.environ.get("CAREERSIM_STORAGE_BACKEND", "memory").lower()
    if backend_str == "sqlite":
        return StorageBackend.SQLITE
    return StorageBackend.MEMORY


def get_database_uri() -> str:
    """Get configured database URI from environment."""
    return os.environ.get("CAREERSIM_DATABASE_URI", DEFAULT_DATABASE_URI)


def get_session_repository(
    backend: StorageBackend | None = None,
    database_uri: str | None = None,
) -> SessionRepository:
    """Factory function to create a session repository.

    Args:
        backend: Storage backend to use. If None, uses environment config.
        database_uri: SQLite path. If None, uses environment config.

    Returns:
        SessionRepository instance
    """
    if backend is None:
        backend = get_storage_backend()

    if backend == StorageBackend.SQLITE:
        return SQLiteSessionRepository(database_uri or get_database_uri())
    return InMemorySessionRepository()
