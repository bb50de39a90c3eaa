"""SQLite-based session repository.

One row per session keyed by session id. Scalar fields get their own columns;
the state vector, action history, event queue, applied events, career mirror
and narrative context are stored as JSON text columns.
"""

import json
import sqlite3
from pathlib import Path
from typing import Optional

from careersim.models.state import PlayerSession

from .repository import SessionRepository

JSON_COLUMNS = {
    "state_vector": "stateVector",
    "action_history": "actionHistory",
    "event_queue": "eventQueue",
    "applied_events": "appliedEvents",
    "career_mirror": "careerMirror",
    "narrative_context": "narrativeContext",
}

SCALAR_COLUMNS = {
    "session_id": "sessionId",
    "player_id": "playerId",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "current_chapter": "currentChapter",
    "current_scene": "currentScene",
    "scene_completed": "sceneCompleted",
    "run_number": "runNumber",
    "role_choice": "roleChoice",
    "experience_level": "experienceLevel",
    "mindset_bias": "mindsetBias",
}


def dict_factory(cursor: sqlite3.Cursor, row: tuple) -> dict:
    """Convert sqlite3 row to dict."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def session_to_row(session: PlayerSession) -> dict:
    """Relational projection of a session."""
    data = session.to_dict()
    row = {column: data[key] for column, key in SCALAR_COLUMNS.items()}
    row["scene_completed"] = int(row["scene_completed"])
    for column, key in JSON_COLUMNS.items():
        row[column] = json.dumps(data[key]) if data[key] is not None else None
    return row


def row_to_session(row: dict) -> PlayerSession:
    """Rebuild a session from its row."""
    data = {key: row[column] for column, key in SCALAR_COLUMNS.items()}
    data["sceneCompleted"] = bool(data["sceneCompleted"])
    for column, key in JSON_COLUMNS.items():
        data[key] = json.loads(row[column]) if row[column] is not None else None
    if data["narrativeContext"] is None:
        del data["narrativeContext"]
    return PlayerSession.from_dict(data)


class SQLiteSessionRepository(SessionRepository):
    """SQLite-based session repository using the standard library driver."""

    def __init__(self, database_uri: str = "instance/careersim.db"):
        """Initialize repository.

        Args:
            database_uri: Path to SQLite database file
        """
        self.database_path = Path(database_uri)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection."""
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = dict_factory
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS player_sessions (
                session_id TEXT PRIMARY KEY,
                player_id TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                current_chapter INTEGER NOT NULL DEFAULT 0,
                current_scene TEXT NOT NULL,
                scene_completed INTEGER NOT NULL DEFAULT 0,
                run_number INTEGER NOT NULL DEFAULT 1,
                role_choice TEXT,
                experience_level TEXT,
                mindset_bias TEXT,
                state_vector TEXT NOT NULL,
                action_history TEXT NOT NULL,
                event_queue TEXT NOT NULL,
                applied_events TEXT NOT NULL,
                career_mirror TEXT,
                narrative_context TEXT
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_sessions_player_id ON player_sessions(player_id)"
        )
        conn.commit()
        conn.close()

    def load_session(self, session_id: str) -> Optional[PlayerSession]:
        """Load a session by ID."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM player_sessions WHERE session_id = ?", (session_id,))
        row = cursor.fetchone()
        conn.close()

        if row is None:
            return None
        return row_to_session(row)

    def save_session(self, session: PlayerSession) -> None:
        """Insert or replace a session."""
        row = session_to_row(session)
        columns = list(row)
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(
            f"{c} = excluded.{c}" for c in columns if c not in ("session_id", "created_at")
        )

        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"""
            INSERT INTO player_sessions ({", ".join(columns)})
            VALUES ({placeholders})
            ON CONFLICT(session_id) DO UPDATE SET {updates}
            """,
            tuple(row[c] for c in columns),
        )
        conn.commit()
        conn.close()

    def delete_session(self, session_id: str) -> bool:
        """Delete a session."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM player_sessions WHERE session_id = ?", (session_id,))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted

    def list_sessions(self, player_id: Optional[str] = None) -> list[dict]:
        """List sessions, optionally filtered by player."""
        conn = self._get_connection()
        cursor = conn.cursor()

        query = """
            SELECT session_id, player_id, current_chapter, current_scene, updated_at
            FROM player_sessions
        """
        if player_id is not None:
            cursor.execute(query + " WHERE player_id = ? ORDER BY updated_at DESC", (player_id,))
        else:
            cursor.execute(query + " ORDER BY updated_at DESC")

        rows = cursor.fetchall()
        conn.close()
        return [
            {
                "sessionId": r["session_id"],
                "playerId": r["player_id"],
                "currentChapter": r["current_chapter"],
                "currentScene": r["current_scene"],
                "updatedAt": r["updated_at"],
            }
            for r in rows
        ]
