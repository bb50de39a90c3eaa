"""Session state models for CareerSim.

This module defines the player's state vector and the persisted session record.
All numeric axes are clamped to [0, 1] on construction and on assignment, so a
StateVector can never hold an out-of-range value.

The session "tick" is the number of actions the player has submitted. Delayed
events are scheduled in ticks (see EventQueueEntry.trigger_at).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from careersim.models.base import CamelModel
from careersim.models.npc import NarrativeContext
from careersim.parameters import (
    AXIS_MAX,
    AXIS_MIN,
    DEFAULT_EMOTIONAL_STATE,
    DEFAULT_STATE_VECTOR,
    ENTRY_SCENE,
)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to the specified range."""
    return max(min_val, min(max_val, value))


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class EmotionalState(str, Enum):
    """Player's categorical emotional state.

    Inherits from str for proper JSON serialization.
    """

    CALM = "calm"
    ANXIOUS = "anxious"
    CONFIDENT = "confident"
    DEFLATED = "deflated"
    NUMB = "numb"


class RoleChoice(str, Enum):
    """Career track the player picked; selects role overlays."""

    ANALYST = "analyst"
    DATA_ENGINEER = "data_engineer"
    DATA_SCIENTIST = "data_scientist"
    AI_ML = "ai_ml"


class ExperienceLevel(str, Enum):
    STUDENT_FRESHER = "student_fresher"
    EARLY_1_3 = "early_1_3"
    MID_3_7 = "mid_3_7"


class MindsetBias(str, Enum):
    AMBITIOUS = "ambitious"
    CAUTIOUS = "cautious"
    IDEALISTIC = "idealistic"
    PRAGMATIC = "pragmatic"


class EventType(str, Enum):
    """Kinds of delayed follow-up events a consequence can schedule."""

    INTERRUPTION = "interruption"
    OPPORTUNITY = "opportunity"
    CONSEQUENCE = "consequence"
    EXPIRY = "expiry"


class EventStatus(str, Enum):
    """Lifecycle of a queued event."""

    PENDING = "pending"
    APPLIED = "applied"
    EXPIRED = "expired"


class StateVector(CamelModel):
    """The player's numeric standing plus emotional state.

    Every numeric axis lies in [0, 1]. Content refers to axes by their
    camelCase name (e.g. ``riskTolerance``); the snake_case attribute name is
    accepted as well.

    Attributes:
        confidence .. networkStrength: Numeric axes (see DEFAULT_STATE_VECTOR)
        emotional_state: One of EmotionalState
    """

    model_config = ConfigDict(validate_assignment=True)

    # Core metrics
    confidence: float = DEFAULT_STATE_VECTOR["confidence"]
    reputation: float = DEFAULT_STATE_VECTOR["reputation"]
    health: float = DEFAULT_STATE_VECTOR["health"]
    worklife: float = DEFAULT_STATE_VECTOR["worklife"]
    family: float = DEFAULT_STATE_VECTOR["family"]

    # Financials
    savings: float = DEFAULT_STATE_VECTOR["savings"]
    salary: float = DEFAULT_STATE_VECTOR["salary"]
    loan: float = DEFAULT_STATE_VECTOR["loan"]

    # Technical skills
    sql: float = DEFAULT_STATE_VECTOR["sql"]
    python: float = DEFAULT_STATE_VECTOR["python"]
    excel: float = DEFAULT_STATE_VECTOR["excel"]
    powerbi: float = DEFAULT_STATE_VECTOR["powerbi"]
    cloud: float = DEFAULT_STATE_VECTOR["cloud"]
    ml: float = DEFAULT_STATE_VECTOR["ml"]
    statistics: float = DEFAULT_STATE_VECTOR["statistics"]
    engineering: float = DEFAULT_STATE_VECTOR["engineering"]

    # Professional skills
    communication: float = DEFAULT_STATE_VECTOR["communication"]
    stakeholder: float = DEFAULT_STATE_VECTOR["stakeholder"]
    presentation: float = DEFAULT_STATE_VECTOR["presentation"]
    leadership: float = DEFAULT_STATE_VECTOR["leadership"]
    negotiation: float = DEFAULT_STATE_VECTOR["negotiation"]
    problem: float = DEFAULT_STATE_VECTOR["problem"]

    # Behavioral / psychological
    energy: float = DEFAULT_STATE_VECTOR["energy"]
    risk_tolerance: float = DEFAULT_STATE_VECTOR["riskTolerance"]
    ethics: float = DEFAULT_STATE_VECTOR["ethics"]
    network_strength: float = DEFAULT_STATE_VECTOR["networkStrength"]

    emotional_state: EmotionalState = EmotionalState(DEFAULT_EMOTIONAL_STATE)

    @field_validator("*", mode="before")
    @classmethod
    def clamp_axes(cls, v: Any, info: ValidationInfo) -> Any:
        """Clamp numeric axes to [0, 1]."""
        if info.field_name == "emotional_state":
            return v
        return clamp(float(v), AXIS_MIN, AXIS_MAX)

    @classmethod
    def axis_fields(cls) -> dict[str, str]:
        """Map content axis name -> attribute name for every numeric axis."""
        return {
            field.alias or name: name
            for name, field in cls.model_fields.items()
            if name != "emotional_state"
        }

    @classmethod
    def resolve_axis(cls, name: str) -> str | None:
        """Attribute name for a content or attribute axis name, or None if unknown."""
        fields = cls.axis_fields()
        if name in fields:
            return fields[name]
        if name in fields.values():
            return name
        return None

    def get_axis(self, name: str) -> float | None:
        """Current value of an axis by content or attribute name."""
        attr = self.resolve_axis(name)
        if attr is None:
            return None
        return getattr(self, attr)

    def axes(self) -> dict[str, float]:
        """All numeric axes keyed by content name."""
        return {alias: getattr(self, attr) for alias, attr in self.axis_fields().items()}


class ActionRecord(CamelModel):
    """One submitted action. History is append-only."""

    scene: str
    action: str
    timestamp: datetime


class EventQueueEntry(CamelModel):
    """A delayed effect waiting on the session's event queue.

    Attributes:
        event_id: Deterministic id (also the dedup key for applied events)
        event_type: Kind of event
        delay_ticks: Delay requested by the authored consequence
        trigger_at: Session tick at which the event becomes due
        status: pending, applied or expired
        payload: Free-form authored payload plus ``sceneOrigin``
    """

    event_id: str
    event_type: EventType
    delay_ticks: int = Field(default=0, ge=0)
    trigger_at: int = Field(default=0, ge=0)
    status: EventStatus = EventStatus.PENDING
    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def scene_origin(self) -> str | None:
        return self.payload.get("sceneOrigin")


class PlayerSession(CamelModel):
    """The unit of player progress.

    Created with chapter 0 and the default state vector. Mutated only through
    the state engine, which always returns a new session object.
    """

    session_id: str
    player_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    current_chapter: int = Field(default=0, ge=0)
    current_scene: str = ENTRY_SCENE
    scene_completed: bool = False
    run_number: int = Field(default=1, ge=1)
    role_choice: RoleChoice | None = None
    experience_level: ExperienceLevel | None = None
    mindset_bias: MindsetBias | None = None
    state_vector: StateVector = Field(default_factory=StateVector)
    action_history: list[ActionRecord] = Field(default_factory=list)
    event_queue: list[EventQueueEntry] = Field(default_factory=list)
    applied_events: list[str] = Field(default_factory=list)
    career_mirror: dict[str, Any] | None = None
    narrative_context: NarrativeContext = Field(default_factory=NarrativeContext)

    @field_validator("applied_events", mode="after")
    @classmethod
    def dedupe_applied(cls, v: list[str]) -> list[str]:
        """Applied event ids behave as a set; keep first-seen order."""
        return list(dict.fromkeys(v))

    @property
    def tick(self) -> int:
        """Current session tick (number of submitted actions)."""
        return len(self.action_history)

    def to_json(self) -> str:
        """Serialize session to JSON string."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, json_str: str) -> PlayerSession:
        """Deserialize session from JSON string."""
        return cls.model_validate_json(json_str)

    @classmethod
    def from_dict(cls, data: dict) -> PlayerSession:
        """Deserialize session from dictionary."""
        return cls.model_validate(data)


def create_session(
    player_id: str | None = None,
    role_choice: RoleChoice | str | None = None,
    experience_level: ExperienceLevel | str | None = None,
    mindset_bias: MindsetBias | str | None = None,
    session_id: str | None = None,
    now: datetime | None = None,
) -> PlayerSession:
    """Create a fresh session at chapter 0 with the default state vector.

    Raises:
        pydantic.ValidationError: If a classification value is not a known enum value
    """
    now = now or utcnow()
    return PlayerSession(
        session_id=session_id or str(uuid.uuid4()),
        player_id=player_id,
        created_at=now,
        updated_at=now,
        role_choice=role_choice,
        experience_level=experience_level,
        mindset_bias=mindset_bias,
    )
