"""SQLAlchemy models for the webapp."""

from .session_record import SessionRecord

__all__ = ["SessionRecord"]
