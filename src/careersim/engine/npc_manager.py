"""NPC Relationship Manager.

Each NPC's attitude has two layers:

- Inferred: a pure function of trust (>= 75 mentor, >= 50 friendly,
  >= 25 neutral, else hostile).
- Explicit: an attitude-shift interaction that sets mentor or hostile locks the
  attitude. Trust changes then leave it alone until another explicit shift.

All functions are pure. They never mutate their inputs and always return new
relationship / context objects.
"""

from __future__ import annotations

from typing import Iterable

from careersim.content.schemas import NPCInteraction
from careersim.models.npc import (
    NarrativeContext,
    NPCAttitude,
    NPCRelationship,
    NPCRole,
)
from careersim.models.state import clamp
from careersim.parameters import (
    DEFAULT_DECAY_FACTOR,
    DEFAULT_NPC_ROLE,
    FRIENDLY_TRUST_THRESHOLD,
    GOOD_STANDING_TRUST,
    MENTOR_TRUST_THRESHOLD,
    NEUTRAL_TRUST_THRESHOLD,
    TRUST_MAX,
    TRUST_MIN,
)

STICKY_ATTITUDES = frozenset({NPCAttitude.MENTOR, NPCAttitude.HOSTILE})


def attitude_for_trust(trust: float) -> NPCAttitude:
    """Attitude band for a trust level, ignoring any explicit override."""
    if trust >= MENTOR_TRUST_THRESHOLD:
        return NPCAttitude.MENTOR
    if trust >= FRIENDLY_TRUST_THRESHOLD:
        return NPCAttitude.FRIENDLY
    if trust >= NEUTRAL_TRUST_THRESHOLD:
        return NPCAttitude.NEUTRAL
    return NPCAttitude.HOSTILE


def infer_attitude(
    trust: float, current: NPCAttitude, locked: bool = False
) -> NPCAttitude:
    """Attitude after a trust change.

    Args:
        trust: New trust level
        current: Attitude before the change
        locked: Whether current was set by an explicit shift

    Returns:
        ``current`` when locked, otherwise the trust band
    """
    if locked:
        return current
    return attitude_for_trust(trust)


def create_relationship(
    npc_id: str,
    name: str | None = None,
    role: NPCRole | str = DEFAULT_NPC_ROLE,
    initial_trust: float = 0.0,
) -> NPCRelationship:
    """New relationship with an inferred (unlocked) attitude."""
    trust = clamp(initial_trust, TRUST_MIN, TRUST_MAX)
    return NPCRelationship(
        npc_id=npc_id,
        name=name or npc_id,
        role=role,
        trust_level=trust,
        attitude=attitude_for_trust(trust),
    )


def _with_trust(npc: NPCRelationship, trust: float) -> NPCRelationship:
    trust = clamp(trust, TRUST_MIN, TRUST_MAX)
    return npc.model_copy(
        update={
            "trust_level": trust,
            "attitude": infer_attitude(trust, npc.attitude, npc.attitude_locked),
        }
    )


def update_trust(npc: NPCRelationship, delta: float) -> NPCRelationship:
    """Add a trust delta, clamp to [0, 100] and re-infer the attitude."""
    return _with_trust(npc, npc.trust_level + delta)


def set_attitude(npc: NPCRelationship, attitude: NPCAttitude | str) -> NPCRelationship:
    """Explicit attitude shift. Mentor and hostile become sticky."""
    attitude = NPCAttitude(attitude)
    return npc.model_copy(
        update={"attitude": attitude, "attitude_locked": attitude in STICKY_ATTITUDES}
    )


def record_interaction(
    npc: NPCRelationship,
    scenario_id: str,
    memory: str | None = None,
    at: int | None = None,
) -> NPCRelationship:
    """Add the scenario to shared history (once) and log the meeting.

    Args:
        npc: Relationship to update
        scenario_id: Scenario the interaction happened in
        memory: Optional note appended to the NPC's memory log
        at: Session tick of the meeting
    """
    history = list(npc.shared_history)
    if scenario_id not in history:
        history.append(scenario_id)

    memories = list(npc.metadata.memories)
    if memory:
        memories.append(memory)
    metadata = npc.metadata.model_copy(
        update={"last_meet_at": at, "memories": memories}
    )
    return npc.model_copy(update={"shared_history": history, "metadata": metadata})


def get_or_create(npc_id: str, context: NarrativeContext) -> NPCRelationship:
    """Existing relationship, or a default one (not added to the context)."""
    existing = context.npc_relationships.get(npc_id)
    if existing is not None:
        return existing
    return create_relationship(npc_id)


def apply_interactions(
    interactions: Iterable[NPCInteraction] | None,
    context: NarrativeContext,
    scenario_id: str,
    at: int | None = None,
) -> NarrativeContext:
    """Apply a consequence's NPC interactions in order.

    Trust deltas apply before attitude shifts, so an explicit shift in the same
    interaction always wins.

    Args:
        interactions: Authored interactions (may be None)
        context: Current narrative context (not modified)
        scenario_id: Scenario the choice was made in
        at: Session tick of the choice

    Returns:
        Updated narrative context; ``context`` itself when there is nothing to apply
    """
    interactions = list(interactions or [])
    if not interactions:
        return context

    relationships = dict(context.npc_relationships)
    for interaction in interactions:
        npc = relationships.get(interaction.npc_id) or create_relationship(
            interaction.npc_id
        )
        if interaction.trust_delta:
            npc = update_trust(npc, interaction.trust_delta)
        if interaction.attitude_shift is not None:
            npc = set_attitude(npc, interaction.attitude_shift)
        npc = record_interaction(npc, scenario_id, interaction.memory, at)
        relationships[interaction.npc_id] = npc

    return context.model_copy(update={"npc_relationships": relationships})


def decay_relationships(
    context: NarrativeContext, factor: float = DEFAULT_DECAY_FACTOR
) -> NarrativeContext:
    """Multiply every NPC's trust by ``factor`` and re-infer attitudes.

    Raises:
        ValueError: If factor is not in (0, 1]
    """
    if not 0 < factor <= 1:
        raise ValueError(f"Decay factor must be in (0, 1], got {factor}")
    if factor == 1:
        return context

    relationships = {
        npc_id: _with_trust(npc, npc.trust_level * factor)
        for npc_id, npc in context.npc_relationships.items()
    }
    return context.model_copy(update={"npc_relationships": relationships})


def has_good_standing(npc: NPCRelationship, min_trust: float = GOOD_STANDING_TRUST) -> bool:
    return npc.trust_level >= min_trust and npc.attitude != NPCAttitude.HOSTILE


def has_mentor_relationship(npc: NPCRelationship) -> bool:
    return npc.attitude == NPCAttitude.MENTOR and npc.trust_level >= MENTOR_TRUST_THRESHOLD


def relationships_summary(context: NarrativeContext) -> list[dict]:
    """Compact per-NPC view for display."""
    return [
        {
            "npcId": npc.npc_id,
            "name": npc.name,
            "trust": npc.trust_level,
            "attitude": npc.attitude.value,
        }
        for npc in context.npc_relationships.values()
    ]
