"""Abstract session store interface.

The engine never talks to a database directly. The webapp and CLI persist
sessions through a SessionRepository; in-memory, SQLite and Flask-SQLAlchemy
backends all implement it, so the core does not know which one is active.
"""

from abc import ABC, abstractmethod
from typing import Optional

from careersim.models.state import PlayerSession


class SessionRepository(ABC):
    """Abstract base class for player session storage.

    Writes are keyed by session id and replace the whole record, so saving the
    same session twice is idempotent.
    """

    @abstractmethod
    def load_session(self, session_id: str) -> Optional[PlayerSession]:
        """Load a session by ID.

        Args:
            session_id: Unique identifier for the session

        Returns:
            PlayerSession, or None if not found
        """
        pass

    @abstractmethod
    def save_session(self, session: PlayerSession) -> None:
        """Insert or replace a session.

        Args:
            session: Complete session to persist
        """
        pass

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Delete a session.

        Args:
            session_id: ID of session to delete

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def list_sessions(self, player_id: Optional[str] = None) -> list[dict]:
        """List sessions, optionally filtered by player, most recent first.

        Args:
            player_id: Optional player ID to filter by

        Returns:
            List of dicts containing: {sessionId, playerId, currentChapter,
            currentScene, updatedAt}
        """
        pass
