"""Pydantic schemas for authored scenario content.

Content is authored as YAML. Each document is either a ScenarioTemplate or a
RoleOverlay; a document is an overlay exactly when it has an ``overrides`` key.
Every field has a checked type and every enumeration is a closed set. Numeric
fields are strict: a quoted "0.5" or a YAML boolean is rejected, while an
integer is accepted where a float is expected.

Structural validation lives here. Cross-reference integrity (rules pointing at
declared actions, feedback keys, overlay targets) lives in
careersim.content.validator so that all violations can be reported together.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import (
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    model_validator,
)
from pydantic.alias_generators import to_camel

from careersim.models.base import CamelModel
from careersim.models.npc import NPCAttitude
from careersim.models.state import EmotionalState, EventType, RoleChoice
from careersim.parameters import CONTENT_VERSION_PATTERN, MAX_INTERACTION_TRUST_DELTA

ConditionOperator = Literal["gt", "lt", "eq", "gte", "lte", "in_range"]
ScenarioType = Literal["text", "meeting", "mail", "taskboard"]
BranchConditionType = Literal[
    "flag", "stat", "emotional", "npcRelation", "eventHistory", "and", "or", "not"
]
DocumentKind = Literal["template", "overlay"]

VERSION_REGEX = CONTENT_VERSION_PATTERN.pattern

WILDCARD_EMOTION = "*"


class ContentModel(CamelModel):
    """Immutable, closed content model."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class Condition(ContentModel):
    """A gating predicate over one state-vector axis.

    ``in_range`` takes a closed interval ``[lo, hi]``; every other operator
    takes a single number.

    Example:
        Condition(variable="confidence", operator="gte", threshold=0.6)
    """

    variable: str = Field(min_length=1)
    operator: ConditionOperator
    threshold: Union[StrictFloat, tuple[StrictFloat, StrictFloat]]

    @model_validator(mode="after")
    def validate_threshold_shape(self) -> Condition:
        """Range operator needs an interval, comparison operators need a number."""
        if self.operator == "in_range":
            if not isinstance(self.threshold, tuple):
                raise ValueError("in_range threshold must be a [low, high] pair")
            low, high = self.threshold
            if low > high:
                raise ValueError(f"in_range threshold low {low} exceeds high {high}")
        elif isinstance(self.threshold, tuple):
            raise ValueError(f"{self.operator} threshold must be a single number")
        return self


class ScenarioAction(ContentModel):
    """A choice offered by a scenario.

    Attributes:
        action_id: Identifier referenced by exactly one consequence rule
        label: Short text shown to the player
        description: Optional longer text
        visible_if: Conditions that must all hold for the action to be offered
        locks_out: Action ids hidden once this action has been taken
    """

    action_id: str = Field(min_length=1)
    label: str
    description: str | None = None
    visible_if: list[Condition] | None = None
    locks_out: list[str] | None = None


class StateDelta(ContentModel):
    """Signed change to one axis. Unknown axis names are tolerated."""

    variable: str = Field(min_length=1)
    delta: StrictFloat


class EmotionalShift(ContentModel):
    """Emotional transition, optionally only from a set of current states."""

    to: EmotionalState
    if_current_in: list[EmotionalState] | None = None


class EventDef(ContentModel):
    """A delayed event scheduled by a consequence."""

    event_type: EventType
    delay_ticks: StrictInt = Field(ge=0)
    payload: dict[str, Any] = Field(default_factory=dict)


class NPCInteraction(ContentModel):
    """Effect of a choice on one NPC relationship."""

    npc_id: str = Field(min_length=1)
    trust_delta: StrictFloat | None = Field(
        default=None,
        ge=-MAX_INTERACTION_TRUST_DELTA,
        le=MAX_INTERACTION_TRUST_DELTA,
    )
    attitude_shift: NPCAttitude | None = None
    memory: str | None = None


class ConsequenceRule(ContentModel):
    """Authored effects of one action."""

    action_id: str = Field(min_length=1)
    state_deltas: list[StateDelta]
    emotional_shift: EmotionalShift | None = None
    spawned_events: list[EventDef] | None = None
    npc_interactions: list[NPCInteraction] | None = None
    set_flags: dict[str, StrictBool] | None = None
    immediate_feedback: str = Field(min_length=1)


class FeedbackVariant(ContentModel):
    """Pre-authored narrative text selected by key."""

    key: str = Field(min_length=1)
    emotional_state: Union[EmotionalState, Literal["*"]]
    narrative_text: str
    audio_cue: str | None = None

    @property
    def is_wildcard(self) -> bool:
        return self.emotional_state == WILDCARD_EMOTION


# Fields each branch condition type must set
_BRANCH_REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "flag": ("flag", "value"),
    "stat": ("stat",),
    "emotional": ("state",),
    "npcRelation": ("npc_id",),
    "eventHistory": ("scenario_id",),
    "and": ("conditions",),
    "or": ("conditions",),
    "not": ("condition",),
}


class BranchCondition(ContentModel):
    """A predicate over the session's narrative standing.

    Unlike Condition, which only reads one numeric axis, a branch condition
    can read narrative flags, the emotional state, NPC relationships and the
    scenario history, and can combine other conditions.

    Types and the fields they use:
        flag: ``flag`` equals ``value``
        stat: axis ``stat`` within the optional ``min``/``max`` bounds
        emotional: emotional state equals ``state``
        npcRelation: NPC ``npcId`` is known, with optional ``minTrust`` and ``attitude``
        eventHistory: ``scenarioId`` was played, optionally with ``choiceId``
        and / or: all / any of ``conditions``
        not: ``condition`` does not hold

    Example:
        BranchCondition(type="npcRelation", npcId="mentor_arun", minTrust=25)
    """

    type: BranchConditionType
    flag: str | None = None
    value: StrictBool | None = None
    stat: str | None = None
    minimum: StrictFloat | None = Field(default=None, alias="min")
    maximum: StrictFloat | None = Field(default=None, alias="max")
    state: EmotionalState | None = None
    npc_id: str | None = None
    min_trust: StrictFloat | None = None
    attitude: NPCAttitude | None = None
    scenario_id: str | None = None
    choice_id: str | None = None
    conditions: list[BranchCondition] | None = None
    condition: BranchCondition | None = None

    @model_validator(mode="after")
    def validate_required_fields(self) -> BranchCondition:
        missing = [
            to_camel(name)
            for name in _BRANCH_REQUIRED_FIELDS[self.type]
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(f"{self.type} condition requires {', '.join(missing)}")
        if self.type in ("and", "or") and not self.conditions:
            raise ValueError(f"{self.type} condition needs at least one condition")
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError(f"stat condition min {self.minimum} exceeds max {self.maximum}")
        return self


class ScenarioBranch(ContentModel):
    """Variant of a scenario shown when all of its conditions hold.

    Attributes:
        branch_id: Identifier, unique within the scenario
        conditions: Branch conditions that must all hold
        variant_title: Replaces the scenario title
        variant_description: Replaces the scenario description
        npc_message: Line an NPC says in this variant
        variant_actions: Declared action ids offered in this variant, in
            scenario order; None offers every action
    """

    branch_id: str = Field(min_length=1)
    conditions: list[BranchCondition] = Field(min_length=1)
    variant_title: str | None = None
    variant_description: str | None = None
    npc_message: str | None = None
    variant_actions: list[str] | None = Field(default=None, min_length=1)


class ScenarioTemplate(ContentModel):
    """Base scenario content.

    Actions and consequence rules are 1:1 by action id; that invariant is
    checked by the validator, not by this schema.
    """

    scenario_id: str = Field(min_length=1)
    content_version: str = Field(pattern=VERSION_REGEX)
    chapter: StrictInt = Field(ge=0)
    title: str
    description: str | None = None
    avatar: str | None = None
    mood: str | None = None
    scenario_type: ScenarioType | None = None
    entry_conditions: list[Condition] | None = None
    actions: list[ScenarioAction] = Field(min_length=1)
    consequence_rules: list[ConsequenceRule] = Field(min_length=1)
    feedback_variants: list[FeedbackVariant] = Field(min_length=1)
    time_constraint: StrictInt | None = Field(default=None, ge=0)
    branches: list[ScenarioBranch] | None = None

    def action_ids(self) -> list[str]:
        return [a.action_id for a in self.actions]

    def feedback_keys(self) -> set[str]:
        return {v.key for v in self.feedback_variants}


class OverlayOverrides(ContentModel):
    """Partial, role-specific replacements for a base template."""

    actions: list[ScenarioAction] | None = None
    consequence_rules: list[ConsequenceRule] | None = None
    narrative_swaps: dict[str, str] | None = None


class RoleOverlay(ContentModel):
    """Role-specific overlay applied on top of a ScenarioTemplate."""

    scenario_id: str = Field(min_length=1)
    content_version: str = Field(pattern=VERSION_REGEX)
    role: RoleChoice
    overrides: OverlayOverrides


ContentDocument = Union[ScenarioTemplate, RoleOverlay]


class MergedScenario(ScenarioTemplate):
    """A template with its role overlay (if any) applied.

    Attributes:
        role: Role whose overlay was applied, None for the bare template
        branch_id: Branch variant applied for a session, if any
        npc_message: The applied branch's NPC line
    """

    role: RoleChoice | None = None
    branch_id: str | None = None
    npc_message: str | None = None

    @property
    def action_index(self) -> dict[str, ScenarioAction]:
        return {a.action_id: a for a in self.actions}

    @property
    def rule_index(self) -> dict[str, ConsequenceRule]:
        return {r.action_id: r for r in self.consequence_rules}

    def get_action(self, action_id: str) -> ScenarioAction | None:
        return self.action_index.get(action_id)

    def get_rule(self, action_id: str) -> ConsequenceRule | None:
        return self.rule_index.get(action_id)

    def variants_for(self, key: str) -> list[FeedbackVariant]:
        return [v for v in self.feedback_variants if v.key == key]


def document_kind(doc: dict) -> DocumentKind:
    """Classify a raw document by the presence of an ``overrides`` key."""
    return "overlay" if "overrides" in doc else "template"


def parse_document(doc: dict) -> ContentDocument:
    """Validate a raw document against the schema for its kind.

    Raises:
        pydantic.ValidationError: If the document does not match its schema
    """
    if document_kind(doc) == "overlay":
        return RoleOverlay.model_validate(doc)
    return ScenarioTemplate.model_validate(doc)
