"""Webapp services."""

from .db_repository import DatabaseSessionRepository
from .session_service import SessionService, get_session_service

__all__ = ["DatabaseSessionRepository", "SessionService", "get_session_service"]
