"""Scenario Resolver.

Turns (session, scenario id, action id) into a ResolutionResult: the rule's
unclamped state deltas, its emotional shift, spawned events, the selected
feedback text and the narrative context after NPC interactions.

Resolution reads the content store and the session and mutates neither.
It is deterministic: identical inputs give identical results, including the
ids of spawned events.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from careersim.content.schemas import (
    EmotionalShift,
    FeedbackVariant,
    MergedScenario,
    ScenarioAction,
    StateDelta,
)
from careersim.content.store import ContentStore
from careersim.engine import npc_manager
from careersim.engine.branches import effective_scenario, set_narrative_flags
from careersim.engine.conditions import conditions_met, failed_conditions
from careersim.errors import (
    ActionNotAvailable,
    ActionNotFound,
    FeedbackVariantMissing,
    ScenarioNotFound,
)
from careersim.models.npc import NarrativeContext
from careersim.models.state import (
    EventQueueEntry,
    EventStatus,
    EventType,
    PlayerSession,
)

logger = logging.getLogger(__name__)

EVENT_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "careersim:spawned-event")


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass(frozen=True)
class SpawnedEvent:
    """An event scheduled by a resolved consequence."""

    event_id: str
    event_type: EventType
    delay_ticks: int
    trigger_at: int
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def scene_origin(self) -> str | None:
        return self.payload.get("sceneOrigin")

    def to_queue_entry(self) -> EventQueueEntry:
        return EventQueueEntry(
            event_id=self.event_id,
            event_type=self.event_type,
            delay_ticks=self.delay_ticks,
            trigger_at=self.trigger_at,
            status=EventStatus.PENDING,
            payload=copy.deepcopy(self.payload),
        )


@dataclass
class ResolutionResult:
    """Everything the state engine needs to apply one action.

    Attributes:
        scenario_id: Scenario the action was submitted against
        action_id: The chosen action
        tick: Session tick the action will be recorded at
        narrative: Selected feedback text
        audio_cue: Optional audio cue of the selected variant
        feedback_key: Key of the selected variant
        state_deltas: The rule's deltas, unclamped
        emotional_shift: Optional emotional transition
        spawned_events: Events to enqueue, already stamped with their origin
        narrative_context: Narrative context after NPC interactions and flags
        entry_conditions_met: Advisory; resolution does not block on it
        branch_id: Branch variant the action was offered in, if any
    """

    scenario_id: str
    action_id: str
    tick: int
    narrative: str
    audio_cue: str | None
    feedback_key: str
    state_deltas: list[StateDelta]
    emotional_shift: EmotionalShift | None
    spawned_events: list[SpawnedEvent]
    narrative_context: NarrativeContext
    entry_conditions_met: bool = True
    branch_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "scenarioId": self.scenario_id,
            "actionId": self.action_id,
            "tick": self.tick,
            "narrative": self.narrative,
            "audioCue": self.audio_cue,
            "feedbackKey": self.feedback_key,
            "stateDeltas": [d.to_dict() for d in self.state_deltas],
            "emotionalShift": self.emotional_shift.to_dict()
            if self.emotional_shift
            else None,
            "spawnedEvents": [e.to_queue_entry().to_dict() for e in self.spawned_events],
            "entryConditionsMet": self.entry_conditions_met,
            "branchId": self.branch_id,
        }


# =============================================================================
# Helpers
# =============================================================================


def select_feedback(
    variants: list[FeedbackVariant], key: str, emotional_state: str
) -> FeedbackVariant | None:
    """Variant for a key: current emotion first, then "*", then any with the key."""
    matching = [v for v in variants if v.key == key]
    for variant in matching:
        if variant.emotional_state == emotional_state:
            return variant
    for variant in matching:
        if variant.is_wildcard:
            return variant
    return matching[0] if matching else None


def spawned_event_id(
    session_id: str, scenario_id: str, action_id: str, tick: int, index: int
) -> str:
    """Deterministic event id; also the dedup key in ``appliedEvents``."""
    name = f"{session_id}:{scenario_id}:{action_id}:{tick}:{index}"
    return str(uuid.uuid5(EVENT_NAMESPACE, name))


def taken_actions(session: PlayerSession, scenario_id: str) -> list[str]:
    return [r.action for r in session.action_history if r.scene == scenario_id]


def locked_out_actions(session: PlayerSession, scenario: MergedScenario) -> set[str]:
    """Action ids hidden by actions already taken in this scenario."""
    index = scenario.action_index
    locked: set[str] = set()
    for action_id in taken_actions(session, scenario.scenario_id):
        action = index.get(action_id)
        if action is not None:
            locked.update(action.locks_out or [])
    return locked


# =============================================================================
# Scenario Resolver
# =============================================================================


class ScenarioResolver:
    """Resolves submitted actions against merged scenario content.

    Usage:
        resolver = ScenarioResolver(store)
        actions = resolver.list_available_actions(session, "ch2_resume")
        result = resolver.resolve(session, "ch2_resume", actions[0].action_id)
    """

    def __init__(self, store: ContentStore):
        self.store = store

    def get_merged_scenario(
        self, session: PlayerSession, scenario_id: str
    ) -> MergedScenario:
        """Merged scenario for the session's role, before branch selection.

        Raises:
            ScenarioNotFound: If no template has this id
        """
        scenario = self.store.get_merged_scenario(scenario_id, session.role_choice)
        if scenario is None:
            raise ScenarioNotFound(scenario_id)
        return scenario

    def get_scenario(self, session: PlayerSession, scenario_id: str) -> MergedScenario:
        """Scenario as this session sees it: role overlay plus matching branch.

        Raises:
            ScenarioNotFound: If no template has this id
        """
        return effective_scenario(
            self.get_merged_scenario(session, scenario_id),
            session.state_vector,
            session.narrative_context,
        )

    def list_available_actions(
        self, session: PlayerSession, scenario_id: str
    ) -> list[ScenarioAction]:
        """Actions the session can see: offered by the branch, visibleIf holds
        and not locked out.

        Raises:
            ScenarioNotFound: If no template has this id
        """
        merged = self.get_merged_scenario(session, scenario_id)
        scenario = effective_scenario(merged, session.state_vector, session.narrative_context)
        locked = locked_out_actions(session, merged)
        return [
            action
            for action in scenario.actions
            if action.action_id not in locked
            and conditions_met(action.visible_if, session.state_vector)
        ]

    def resolve(
        self, session: PlayerSession, scenario_id: str, action_id: str
    ) -> ResolutionResult:
        """Resolve one action without touching the session.

        Args:
            session: Current session (read only)
            scenario_id: Scenario the action belongs to
            action_id: The chosen action

        Returns:
            ResolutionResult for the state engine

        Raises:
            ScenarioNotFound: Unknown scenario id
            ActionNotFound: Action not declared by the merged scenario
            ActionNotAvailable: Action hidden by visibleIf, not offered by the
                matching branch, or locked out
            FeedbackVariantMissing: Rule's feedback key has no variant
        """
        merged = self.get_merged_scenario(session, scenario_id)
        state_vector = session.state_vector
        scenario = effective_scenario(merged, state_vector, session.narrative_context)

        entry_met = conditions_met(scenario.entry_conditions, state_vector)
        if not entry_met:
            unmet = [
                f"{c.variable} {c.operator} {c.threshold}"
                for c in failed_conditions(scenario.entry_conditions, state_vector)
            ]
            logger.warning(
                f"Entry conditions not met for scenario {scenario_id} "
                f"(session {session.session_id}): {', '.join(unmet)}"
            )

        action = merged.get_action(action_id)
        rule = merged.get_rule(action_id)
        if action is None or rule is None:
            raise ActionNotFound(scenario_id, action_id)

        if scenario.get_action(action_id) is None:
            raise ActionNotAvailable(
                scenario_id, action_id, f"not offered in branch '{scenario.branch_id}'"
            )
        if not conditions_met(action.visible_if, state_vector):
            raise ActionNotAvailable(scenario_id, action_id, "visibility conditions not met")
        if action_id in locked_out_actions(session, merged):
            raise ActionNotAvailable(scenario_id, action_id, "locked out by an earlier choice")

        variant = select_feedback(
            scenario.feedback_variants,
            rule.immediate_feedback,
            state_vector.emotional_state.value,
        )
        if variant is None:
            logger.error(
                f"Scenario {scenario_id} rule {action_id} references missing "
                f"feedback variant '{rule.immediate_feedback}'"
            )
            raise FeedbackVariantMissing(scenario_id, rule.immediate_feedback)

        tick = session.tick + 1
        context = npc_manager.apply_interactions(
            rule.npc_interactions, session.narrative_context, scenario_id, at=tick
        )
        context = set_narrative_flags(context, rule.set_flags)

        spawned = []
        for index, event in enumerate(rule.spawned_events or []):
            payload = copy.deepcopy(event.payload)
            payload["sceneOrigin"] = scenario_id
            spawned.append(
                SpawnedEvent(
                    event_id=spawned_event_id(
                        session.session_id, scenario_id, action_id, tick, index
                    ),
                    event_type=event.event_type,
                    delay_ticks=event.delay_ticks,
                    trigger_at=tick + event.delay_ticks,
                    payload=payload,
                )
            )

        return ResolutionResult(
            scenario_id=scenario_id,
            action_id=action_id,
            tick=tick,
            narrative=variant.narrative_text,
            audio_cue=variant.audio_cue,
            feedback_key=variant.key,
            state_deltas=list(rule.state_deltas),
            emotional_shift=rule.emotional_shift,
            spawned_events=spawned,
            narrative_context=context,
            entry_conditions_met=entry_met,
            branch_id=scenario.branch_id,
        )
