"""Session record model: the relational projection of a PlayerSession."""

from datetime import datetime, timezone
from typing import Any

from careersim.models.state import PlayerSession

from ..extensions import db


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionRecord(db.Model):
    """One row per player session.

    Classification and progress fields are plain columns so they can be
    queried; the state vector, history, queue and narrative context are JSON.
    """

    __tablename__ = "player_sessions"

    session_id = db.Column(db.String(64), primary_key=True)
    player_id = db.Column(db.String(128), nullable=True, index=True)

    # Timestamps
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    # Progress
    current_chapter = db.Column(db.Integer, default=0, nullable=False)
    current_scene = db.Column(db.String(128), nullable=False)
    scene_completed = db.Column(db.Boolean, default=False, nullable=False)
    run_number = db.Column(db.Integer, default=1, nullable=False)

    # Classification
    role_choice = db.Column(db.String(32), nullable=True)
    experience_level = db.Column(db.String(32), nullable=True)
    mindset_bias = db.Column(db.String(32), nullable=True)

    # Structured state (JSON)
    state_vector = db.Column(db.JSON, nullable=False)
    action_history = db.Column(db.JSON, nullable=False)
    event_queue = db.Column(db.JSON, nullable=False)
    applied_events = db.Column(db.JSON, nullable=False)
    career_mirror = db.Column(db.JSON, nullable=True)
    narrative_context = db.Column(db.JSON, nullable=True)

    def update_from_session(self, session: PlayerSession) -> None:
        """Copy every field of a session onto this row."""
        data: dict[str, Any] = session.to_dict()
        self.session_id = session.session_id
        self.player_id = session.player_id
        self.created_at = session.created_at
        self.updated_at = session.updated_at
        self.current_chapter = session.current_chapter
        self.current_scene = session.current_scene
        self.scene_completed = session.scene_completed
        self.run_number = session.run_number
        self.role_choice = data["roleChoice"]
        self.experience_level = data["experienceLevel"]
        self.mindset_bias = data["mindsetBias"]
        self.state_vector = data["stateVector"]
        self.action_history = data["actionHistory"]
        self.event_queue = data["eventQueue"]
        self.applied_events = data["appliedEvents"]
        self.career_mirror = data["careerMirror"]
        self.narrative_context = data["narrativeContext"]

    def to_session(self) -> PlayerSession:
        """Rebuild the PlayerSession this row stores."""
        data = {
            "sessionId": self.session_id,
            "playerId": self.player_id,
            "createdAt": _aware(self.created_at),
            "updatedAt": _aware(self.updated_at),
            "currentChapter": self.current_chapter,
            "currentScene": self.current_scene,
            "sceneCompleted": self.scene_completed,
            "runNumber": self.run_number,
            "roleChoice": self.role_choice,
            "experienceLevel": self.experience_level,
            "mindsetBias": self.mindset_bias,
            "stateVector": self.state_vector,
            "actionHistory": self.action_history,
            "eventQueue": self.event_queue,
            "appliedEvents": self.applied_events,
            "careerMirror": self.career_mirror,
        }
        if self.narrative_context is not None:
            data["narrativeContext"] = self.narrative_context
        return PlayerSession.from_dict(data)

    def __repr__(self) -> str:
        return f"<SessionRecord {self.session_id} scene={self.current_scene}>"
