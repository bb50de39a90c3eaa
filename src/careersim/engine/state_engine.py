"""State Engine.

Applies a ResolutionResult to a PlayerSession. Every function here takes a
session and returns a new one; the input session is never modified, so a
failure anywhere before persistence leaves the stored session untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from careersim.engine.resolver import ResolutionResult
from careersim.models.npc import ScenarioHistoryEntry
from careersim.models.state import (
    ActionRecord,
    EventQueueEntry,
    EventStatus,
    PlayerSession,
    clamp,
    utcnow,
)
from careersim.parameters import AXIS_MAX, AXIS_MIN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitActionRequest:
    """A player's action submission."""

    scenario_id: str
    action_id: str

    @classmethod
    def from_dict(cls, data: dict) -> SubmitActionRequest:
        return cls(scenario_id=data["scenarioId"], action_id=data["actionId"])


def apply_state_delta(
    session: PlayerSession,
    result: ResolutionResult,
    request: SubmitActionRequest,
    now: datetime | None = None,
) -> PlayerSession:
    """Apply a resolved consequence.

    Numeric deltas are added and clamped to [0, 1]; unknown axes are skipped.
    The emotional shift applies unless its ``ifCurrentIn`` set excludes the
    current state. The action is appended to history, spawned events are
    queued as pending, and the scene is marked completed.

    Args:
        session: Session before the action
        result: Output of ScenarioResolver.resolve for this request
        request: The submission being applied
        now: Timestamp for the action record (defaults to current UTC time)

    Returns:
        New session with the consequence applied

    Raises:
        ValueError: If the result was resolved for a different action
    """
    if (result.scenario_id, result.action_id) != (request.scenario_id, request.action_id):
        raise ValueError(
            f"Resolution for {result.scenario_id}/{result.action_id} does not match "
            f"request {request.scenario_id}/{request.action_id}"
        )
    now = now or utcnow()
    updated = session.model_copy(deep=True)

    state_vector = updated.state_vector
    for delta in result.state_deltas:
        attr = state_vector.resolve_axis(delta.variable)
        if attr is None:
            logger.warning(
                f"Ignoring delta for unknown axis '{delta.variable}' "
                f"in scenario {result.scenario_id}"
            )
            continue
        setattr(
            state_vector,
            attr,
            clamp(getattr(state_vector, attr) + delta.delta, AXIS_MIN, AXIS_MAX),
        )

    shift = result.emotional_shift
    if shift is not None:
        if shift.if_current_in is None or state_vector.emotional_state in shift.if_current_in:
            state_vector.emotional_state = shift.to

    updated.action_history.append(
        ActionRecord(scene=request.scenario_id, action=request.action_id, timestamp=now)
    )
    updated.event_queue.extend(e.to_queue_entry() for e in result.spawned_events)

    context = result.narrative_context.model_copy(deep=True)
    context.scenario_history.append(
        ScenarioHistoryEntry(
            scenario_id=request.scenario_id,
            choice_id=request.action_id,
            at=updated.tick,
        )
    )
    updated.narrative_context = context
    updated.scene_completed = True
    updated.updated_at = now
    return updated


def handle_mid_scene_resume(session: PlayerSession) -> PlayerSession:
    """Clear pending timers scoped to the active scene when resuming mid-scene.

    A completed scene is returned unchanged. Events that are applied, or that
    originated in another scene, are always kept.
    """
    if session.scene_completed:
        return session

    applied = set(session.applied_events)
    kept = [
        entry
        for entry in session.event_queue
        if not (
            entry.status == EventStatus.PENDING
            and entry.event_id not in applied
            and entry.scene_origin == session.current_scene
        )
    ]
    if len(kept) == len(session.event_queue):
        return session

    logger.info(
        f"Resume of session {session.session_id} cleared "
        f"{len(session.event_queue) - len(kept)} pending events from {session.current_scene}"
    )
    updated = session.model_copy(deep=True)
    updated.event_queue = [entry.model_copy(deep=True) for entry in kept]
    return updated


def due_events(session: PlayerSession) -> list[EventQueueEntry]:
    """Pending, unapplied events whose trigger tick has been reached."""
    applied = set(session.applied_events)
    tick = session.tick
    return [
        entry
        for entry in session.event_queue
        if entry.status == EventStatus.PENDING
        and entry.event_id not in applied
        and entry.trigger_at <= tick
    ]


def mark_events_applied(
    session: PlayerSession,
    event_ids: Iterable[str],
    now: datetime | None = None,
) -> PlayerSession:
    """Mark queued events applied. Unknown or already-applied ids are ignored."""
    wanted = set(event_ids)
    applied = set(session.applied_events)
    to_apply = [
        entry.event_id
        for entry in session.event_queue
        if entry.event_id in wanted and entry.event_id not in applied
    ]
    if not to_apply:
        return session

    updated = session.model_copy(deep=True)
    for entry in updated.event_queue:
        if entry.event_id in to_apply:
            entry.status = EventStatus.APPLIED
    updated.applied_events = [*updated.applied_events, *dict.fromkeys(to_apply)]
    updated.updated_at = now or utcnow()
    return updated


def advance_scene(
    session: PlayerSession,
    scene_id: str,
    chapter: int | None = None,
    now: datetime | None = None,
) -> PlayerSession:
    """Move the session to a new active scene and reopen it.

    Raises:
        ValueError: If chapter is negative
    """
    if chapter is not None and chapter < 0:
        raise ValueError(f"Chapter must be non-negative, got {chapter}")
    updated = session.model_copy(deep=True)
    updated.current_scene = scene_id
    if chapter is not None:
        updated.current_chapter = chapter
    updated.scene_completed = False
    updated.updated_at = now or utcnow()
    return updated
