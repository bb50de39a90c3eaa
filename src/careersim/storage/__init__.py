"""Storage module for CareerSim.

This module provides the session repository interface and its standalone
implementations. The webapp adds a Flask-SQLAlchemy backed implementation.

Usage:
    from careersim.storage import get_session_repository

    # Get repository using configured backend (from environment)
    sessions = get_session_repository()

    # Or specify backend explicitly
    from careersim.storage import StorageBackend
    sessions = get_session_repository(StorageBackend.SQLITE)

Configuration via environment variables:
    CAREERSIM_STORAGE_BACKEND: "memory" or "sqlite" (default: "memory")
    CAREERSIM_DATABASE_URI: SQLite database path (default: "instance/careersim.db")
"""

from .config import (
    StorageBackend,
    get_database_uri,
    get_session_repository,
    get_storage_backend,
)
from .memory_repo import InMemorySessionRepository, session_summary
from .repository import SessionRepository
from .sqlite_repo import SQLiteSessionRepository

__all__ = [
    # Abstract interface
    "SessionRepository",
    # Implementations
    "InMemorySessionRepository",
    "SQLiteSessionRepository",
    "session_summary",
    # Configuration
    "StorageBackend",
    "get_storage_backend",
    "get_database_uri",
    # Factory functions
    "get_session_repository",
]
