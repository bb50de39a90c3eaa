"""In-memory session repository, used by tests and single-process dev servers."""

import threading
from typing import Optional

from careersim.models.state import PlayerSession

from .repository import SessionRepository


def session_summary(session: PlayerSession) -> dict:
    """Listing metadata for a session."""
    return {
        "sessionId": session.session_id,
        "playerId": session.player_id,
        "currentChapter": session.current_chapter,
        "currentScene": session.current_scene,
        "updatedAt": session.updated_at.isoformat(),
    }


class InMemorySessionRepository(SessionRepository):
    """Dict-backed repository.

    Sessions are deep-copied on the way in and out, so callers can never
    alias the stored record.
    """

    def __init__(self):
        self._sessions: dict[str, PlayerSession] = {}
        self._lock = threading.Lock()

    def load_session(self, session_id: str) -> Optional[PlayerSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session else None

    def save_session(self, session: PlayerSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session.model_copy(deep=True)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list_sessions(self, player_id: Optional[str] = None) -> list[dict]:
        with self._lock:
            sessions = [
                s
                for s in self._sessions.values()
                if player_id is None or s.player_id == player_id
            ]
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return [session_summary(s) for s in sessions]
