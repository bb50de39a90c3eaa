"""Narrative engine: condition gating, NPC relationships, resolution and state application."""

from .conditions import conditions_met, evaluate_condition
from .mirror import MirrorResult, generate_mirror
from .resolver import ResolutionResult, ScenarioResolver, SpawnedEvent
from .state_engine import (
    SubmitActionRequest,
    advance_scene,
    apply_state_delta,
    due_events,
    handle_mid_scene_resume,
    mark_events_applied,
)

__all__ = [
    "MirrorResult",
    "ResolutionResult",
    "ScenarioResolver",
    "SpawnedEvent",
    "SubmitActionRequest",
    "advance_scene",
    "apply_state_delta",
    "conditions_met",
    "due_events",
    "evaluate_condition",
    "generate_mirror",
    "handle_mid_scene_resume",
    "mark_events_applied",
]
