"""Session service - orchestrates load, resolve, apply and persist.

Each operation on a session runs under that session's lock, so two requests
for the same session id are applied one after the other within a process.
A lock lives only while some request holds or waits on it.
Nothing is persisted until the whole operation has succeeded, which keeps the
stored session unchanged when resolution fails.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

from flask import current_app

from careersim.content.schemas import MergedScenario, ScenarioAction
from careersim.content.store import ContentStore
from careersim.engine.mirror import MirrorResult, generate_mirror
from careersim.engine.resolver import ResolutionResult, ScenarioResolver
from careersim.engine.state_engine import (
    SubmitActionRequest,
    advance_scene,
    apply_state_delta,
    due_events,
    handle_mid_scene_resume,
    mark_events_applied,
)
from careersim.errors import SessionNotFound
from careersim.models.state import EventQueueEntry, PlayerSession, create_session
from careersim.storage.repository import SessionRepository

logger = logging.getLogger(__name__)

EXTENSION_KEY = "careersim_session_service"


class SessionService:
    """Application service behind the session API."""

    def __init__(self, store: ContentStore, repository: SessionRepository):
        self.store = store
        self.repository = repository
        self.resolver = ScenarioResolver(store)
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    @contextmanager
    def _session_lock(self, session_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
        with lock:
            yield

    def _load(self, session_id: str) -> PlayerSession:
        session = self.repository.load_session(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def create_session(
        self,
        player_id: str | None = None,
        role_choice: str | None = None,
        experience_level: str | None = None,
        mindset_bias: str | None = None,
    ) -> PlayerSession:
        """Create and persist a fresh session.

        Raises:
            pydantic.ValidationError: If a classification value is unknown
        """
        session = create_session(
            player_id=player_id,
            role_choice=role_choice,
            experience_level=experience_level,
            mindset_bias=mindset_bias,
        )
        self.repository.save_session(session)
        logger.info(f"Created session {session.session_id} (role={role_choice})")
        return session

    def get_session(self, session_id: str) -> PlayerSession:
        return self._load(session_id)

    def submit_action(
        self, session_id: str, scenario_id: str, action_id: str
    ) -> tuple[PlayerSession, ResolutionResult]:
        """Resolve and apply one action, then persist the result.

        Raises:
            SessionNotFound: Unknown session
            ScenarioNotFound, ActionNotFound, FeedbackVariantMissing: Resolution failed
        """
        with self._session_lock(session_id):
            session = self._load(session_id)
            result = self.resolver.resolve(session, scenario_id, action_id)
            request = SubmitActionRequest(scenario_id=scenario_id, action_id=action_id)
            updated = apply_state_delta(session, result, request)
            self.repository.save_session(updated)

        logger.info(
            f"Session {session_id} took {action_id} in {scenario_id} "
            f"(tick {updated.tick}, {len(result.spawned_events)} events queued)"
        )
        return updated, result

    def get_scenario(self, session_id: str, scenario_id: str) -> MergedScenario:
        """Scenario with the session's role overlay and matching branch applied."""
        return self.resolver.get_scenario(self._load(session_id), scenario_id)

    def list_actions(self, session_id: str, scenario_id: str) -> list[ScenarioAction]:
        session = self._load(session_id)
        return self.resolver.list_available_actions(session, scenario_id)

    def pending_events(self, session_id: str) -> list[EventQueueEntry]:
        return due_events(self._load(session_id))

    def acknowledge_events(self, session_id: str, event_ids: list[str]) -> PlayerSession:
        with self._session_lock(session_id):
            session = self._load(session_id)
            updated = mark_events_applied(session, event_ids)
            if updated is not session:
                self.repository.save_session(updated)
        return updated

    def resume(self, session_id: str) -> PlayerSession:
        with self._session_lock(session_id):
            session = self._load(session_id)
            updated = handle_mid_scene_resume(session)
            if updated is not session:
                self.repository.save_session(updated)
        return updated

    def advance(
        self, session_id: str, scene_id: str, chapter: int | None = None
    ) -> PlayerSession:
        with self._session_lock(session_id):
            session = self._load(session_id)
            updated = advance_scene(session, scene_id, chapter)
            self.repository.save_session(updated)
        logger.info(f"Session {session_id} advanced to {scene_id} (chapter {updated.current_chapter})")
        return updated

    def mirror(self, session_id: str) -> MirrorResult:
        return generate_mirror(self._load(session_id))


def get_session_service() -> SessionService:
    """Get the session service configured for the current app."""
    return current_app.extensions[EXTENSION_KEY]
