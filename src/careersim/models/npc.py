"""NPC relationship and narrative-context models.

A NarrativeContext lives inside each PlayerSession and is threaded explicitly
through the resolver; nothing here is global state. Relationship records are
updated by the pure functions in careersim.engine.npc_manager.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from careersim.models.base import CamelModel
from careersim.parameters import DEFAULT_NPC_ROLE, TRUST_MAX, TRUST_MIN


class NPCAttitude(str, Enum):
    """An NPC's categorical disposition toward the player."""

    MENTOR = "mentor"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    HOSTILE = "hostile"


class NPCRole(str, Enum):
    RECRUITER = "recruiter"
    MENTOR = "mentor"
    PEER = "peer"
    MANAGER = "manager"
    RIVAL = "rival"
    CLIENT = "client"


class NPCMetadata(CamelModel):
    """Memory the NPC keeps about the player."""

    company: str | None = None
    title: str | None = None
    last_meet_at: int | None = None  # session tick
    memories: list[str] = Field(default_factory=list)


class NPCRelationship(CamelModel):
    """Relationship between the player and one NPC.

    Attributes:
        npc_id: Stable NPC identifier
        name: Display name
        role: NPC's role tag
        trust_level: Trust in [0, 100]
        attitude: Current attitude
        attitude_locked: True when attitude was set by an explicit shift; trust
            changes then no longer re-infer it
        shared_history: Distinct scenario ids shared with the player, in order
        metadata: Last meeting tick and memory log
    """

    npc_id: str
    name: str
    role: NPCRole = NPCRole(DEFAULT_NPC_ROLE)
    trust_level: float = Field(default=0.0, ge=TRUST_MIN, le=TRUST_MAX)
    attitude: NPCAttitude = NPCAttitude.HOSTILE
    attitude_locked: bool = False
    shared_history: list[str] = Field(default_factory=list)
    metadata: NPCMetadata = Field(default_factory=NPCMetadata)


class ScenarioHistoryEntry(CamelModel):
    """A scenario/choice pair the story remembers, stamped with the session tick."""

    scenario_id: str
    choice_id: str
    at: int


class NarrativeContext(CamelModel):
    """Narrative progression carried by a session."""

    npc_relationships: dict[str, NPCRelationship] = Field(default_factory=dict)
    scenario_history: list[ScenarioHistoryEntry] = Field(default_factory=list)
    narrative_flags: dict[str, bool] = Field(default_factory=dict)
