"""CareerSim session and relationship models.

This module exports the core data structures shared by the content layer,
the engine and the storage backends.
"""

from .base import CamelModel
from .npc import (
    NarrativeContext,
    NPCAttitude,
    NPCMetadata,
    NPCRelationship,
    NPCRole,
    ScenarioHistoryEntry,
)
from .state import (
    ActionRecord,
    EmotionalState,
    EventQueueEntry,
    EventStatus,
    EventType,
    ExperienceLevel,
    MindsetBias,
    PlayerSession,
    RoleChoice,
    StateVector,
    clamp,
    create_session,
    utcnow,
)

__all__ = [
    "CamelModel",
    # Enums
    "EmotionalState",
    "EventStatus",
    "EventType",
    "ExperienceLevel",
    "MindsetBias",
    "NPCAttitude",
    "NPCRole",
    "RoleChoice",
    # Session models
    "ActionRecord",
    "EventQueueEntry",
    "PlayerSession",
    "StateVector",
    # Narrative models
    "NarrativeContext",
    "NPCMetadata",
    "NPCRelationship",
    "ScenarioHistoryEntry",
    # Functions
    "clamp",
    "create_session",
    "utcnow",
]
