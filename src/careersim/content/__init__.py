"""Authored scenario content: schemas, validation and the merged-content store."""

from .schemas import (
    Condition,
    ConsequenceRule,
    ContentDocument,
    EmotionalShift,
    EventDef,
    FeedbackVariant,
    MergedScenario,
    NPCInteraction,
    OverlayOverrides,
    RoleOverlay,
    ScenarioAction,
    ScenarioTemplate,
    StateDelta,
    document_kind,
    parse_document,
)
from .store import ContentStore, merge_scenario
from .validator import (
    ContentValidator,
    DocumentResult,
    ValidationReport,
    validate_content,
)

__all__ = [
    # Schemas
    "Condition",
    "ConsequenceRule",
    "ContentDocument",
    "EmotionalShift",
    "EventDef",
    "FeedbackVariant",
    "MergedScenario",
    "NPCInteraction",
    "OverlayOverrides",
    "RoleOverlay",
    "ScenarioAction",
    "ScenarioTemplate",
    "StateDelta",
    "document_kind",
    "parse_document",
    # Validation
    "ContentValidator",
    "DocumentResult",
    "ValidationReport",
    "validate_content",
    # Store
    "ContentStore",
    "merge_scenario",
]
