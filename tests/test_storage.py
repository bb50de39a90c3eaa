"""Tests for the storage module.

Tests cover:
- Storage configuration functions
- Parametrized tests to verify both session backends behave identically
"""

from datetime import datetime, timedelta, timezone

import pytest

from careersim.models.state import EventQueueEntry, StateVector, create_session
from careersim.models.npc import NarrativeContext, NPCRelationship
from careersim.storage.config import (
    StorageBackend,
    get_session_repository,
    get_storage_backend,
)
from careersim.storage.memory_repo import InMemorySessionRepository
from careersim.storage.sqlite_repo import SQLiteSessionRepository

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_session(session_id, player_id=None, minutes=0):
    """A session with some progress so every stored column is exercised."""
    session = create_session(
        player_id=player_id,
        role_choice="analyst",
        experience_level="student_fresher",
        session_id=session_id,
        now=T0,
    )
    return session.model_copy(
        update={
            "updated_at": T0 + timedelta(minutes=minutes),
            "current_chapter": 2,
            "current_scene": "ch2_resume",
            "state_vector": StateVector(confidence=0.8, sql=0.25),
            "event_queue": [
                EventQueueEntry(
                    eventId="e1",
                    eventType="consequence",
                    delayTicks=2,
                    triggerAt=3,
                    payload={"sceneOrigin": "ch2_resume"},
                )
            ],
            "applied_events": ["e0"],
            "narrative_context": NarrativeContext(
                npcRelationships={
                    "priya": NPCRelationship(npcId="priya", name="Priya", trustLevel=40)
                },
                narrativeFlags={"met_priya": True},
            ),
        }
    )


# ============================================================================
# Storage Configuration Tests
# ============================================================================


class TestStorageConfig:
    """Tests for storage configuration."""

    def test_get_storage_backend_default(self, monkeypatch):
        """Test default storage backend is memory."""
        monkeypatch.delenv("CAREERSIM_STORAGE_BACKEND", raising=False)
        assert get_storage_backend() == StorageBackend.MEMORY

    def test_factory_returns_memory_repo(self):
        """Test factory returns the in-memory repository."""
        repo = get_session_repository(StorageBackend.MEMORY)
        assert isinstance(repo, InMemorySessionRepository)

    def test_factory_uses_env_when_backend_not_specified(self, tmp_path, monkeypatch):
        """Test factory reads backend and database path from the environment."""
        monkeypatch.setenv("CAREERSIM_STORAGE_BACKEND", "SQLite")
        db_path = str(tmp_path / "env.db")
        monkeypatch.setenv("CAREERSIM_DATABASE_URI", db_path)

        repo = get_session_repository()
        assert isinstance(repo, SQLiteSessionRepository)
        assert str(repo.database_path) == db_path


# ============================================================================
# Parametrized Session Repository Tests
# ============================================================================


@pytest.fixture
def memory_session_repo():
    return InMemorySessionRepository()


@pytest.fixture
def sqlite_session_repo(tmp_path):
    return SQLiteSessionRepository(str(tmp_path / "nested" / "sessions.db"))


class TestSessionRepositoryIntegration:
    """Tests that both session repositories behave identically."""

    @pytest.fixture(params=["memory", "sqlite"])
    def session_repo(self, request, memory_session_repo, sqlite_session_repo):
        """Parametrized fixture that provides both repository implementations."""
        if request.param == "memory":
            return memory_session_repo
        return sqlite_session_repo

    def test_empty(self, session_repo):
        """Test an empty repository has no sessions."""
        assert session_repo.list_sessions() == []
        assert session_repo.load_session("missing") is None

    def test_save_load_roundtrip(self, session_repo):
        """Test a saved session loads back equal, nested state included."""
        session = make_session("s1", player_id="p1")
        session_repo.save_session(session)

        loaded = session_repo.load_session("s1")
        assert loaded == session
        assert loaded.narrative_context.npc_relationships["priya"].trust_level == 40
        assert loaded.event_queue[0].scene_origin == "ch2_resume"

    def test_loaded_copy_is_detached(self, session_repo):
        """Test mutating a loaded session does not change the stored one."""
        session_repo.save_session(make_session("s1"))
        loaded = session_repo.load_session("s1")
        loaded.applied_events.append("e9")

        assert session_repo.load_session("s1").applied_events == ["e0"]

    def test_save_overwrites(self, session_repo):
        """Test saving the same id replaces the record."""
        session = make_session("s1")
        session_repo.save_session(session)
        session_repo.save_session(session.model_copy(update={"scene_completed": True}))

        assert session_repo.load_session("s1").scene_completed is True
        assert len(session_repo.list_sessions()) == 1

    def test_list_filters_and_orders(self, session_repo):
        """Test listing filters by player and returns newest first."""
        session_repo.save_session(make_session("old", player_id="p1", minutes=0))
        session_repo.save_session(make_session("new", player_id="p1", minutes=5))
        session_repo.save_session(make_session("other", player_id="p2", minutes=10))

        assert [s["sessionId"] for s in session_repo.list_sessions("p1")] == ["new", "old"]
        summary = session_repo.list_sessions()[0]
        assert summary["sessionId"] == "other"
        assert summary["currentScene"] == "ch2_resume"
        assert summary["currentChapter"] == 2

    def test_delete(self, session_repo):
        """Test delete removes the session and reports whether it existed."""
        session_repo.save_session(make_session("s1"))
        assert session_repo.delete_session("s1") is True
        assert session_repo.delete_session("s1") is False
        assert session_repo.load_session("s1") is None
