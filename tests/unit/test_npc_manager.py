"""Unit tests for careersim.engine.npc_manager."""

import pytest

from careersim.content.schemas import NPCInteraction
from careersim.engine import npc_manager
from careersim.models.npc import NarrativeContext, NPCAttitude, NPCRole


class TestAttitudeInference:
    """Tests for trust bands and sticky attitudes."""

    @pytest.mark.parametrize(
        "trust,attitude",
        [
            (100, NPCAttitude.MENTOR),
            (75, NPCAttitude.MENTOR),
            (74.9, NPCAttitude.FRIENDLY),
            (50, NPCAttitude.FRIENDLY),
            (25, NPCAttitude.NEUTRAL),
            (24, NPCAttitude.HOSTILE),
            (0, NPCAttitude.HOSTILE),
        ],
    )
    def test_trust_bands(self, trust, attitude):
        """Attitude follows the trust bands when unlocked."""
        assert npc_manager.infer_attitude(trust, NPCAttitude.NEUTRAL) == attitude

    def test_locked_attitude_kept(self):
        """A locked attitude ignores trust."""
        assert npc_manager.infer_attitude(90, NPCAttitude.HOSTILE, locked=True) == NPCAttitude.HOSTILE

    def test_explicit_hostile_survives_trust_gain(self):
        """Trust 80 makes a mentor; an explicit hostile shift then sticks through trust 90."""
        npc = npc_manager.create_relationship("arun")
        npc = npc_manager.update_trust(npc, 80)
        assert npc.attitude == NPCAttitude.MENTOR

        npc = npc_manager.set_attitude(npc, "hostile")
        assert npc.attitude_locked
        npc = npc_manager.update_trust(npc, 10)
        assert npc.trust_level == 90
        assert npc.attitude == NPCAttitude.HOSTILE

    def test_explicit_neutral_does_not_lock(self):
        """Only mentor and hostile shifts lock the attitude."""
        npc = npc_manager.set_attitude(npc_manager.create_relationship("x"), NPCAttitude.NEUTRAL)
        assert not npc.attitude_locked
        assert npc_manager.update_trust(npc, 60).attitude == NPCAttitude.FRIENDLY


class TestRelationships:
    """Tests for relationship creation and trust updates."""

    def test_create_defaults(self):
        """New relationships start at trust 0, hostile, as a peer."""
        npc = npc_manager.create_relationship("priya")
        assert npc.name == "priya"
        assert npc.trust_level == 0
        assert npc.attitude == NPCAttitude.HOSTILE
        assert npc.role == NPCRole.PEER
        assert not npc.attitude_locked

    def test_trust_clamped(self):
        """Trust stays within [0, 100]."""
        npc = npc_manager.create_relationship("x", initial_trust=90)
        assert npc_manager.update_trust(npc, 50).trust_level == 100
        assert npc_manager.update_trust(npc, -500).trust_level == 0

    def test_update_does_not_mutate(self):
        """Updates return new objects."""
        npc = npc_manager.create_relationship("x", initial_trust=10)
        npc_manager.update_trust(npc, 20)
        assert npc.trust_level == 10

    def test_get_or_create(self):
        """Known NPCs are returned; unknown ones get a default record not added to the context."""
        context = npc_manager.apply_interactions(
            [NPCInteraction(npcId="a", trustDelta=40)], NarrativeContext(), "s"
        )
        assert npc_manager.get_or_create("a", context).trust_level == 40
        fresh = npc_manager.get_or_create("b", context)
        assert fresh.trust_level == 0
        assert "b" not in context.npc_relationships

    def test_record_interaction(self):
        """History holds distinct scenario ids; memories and the tick are logged."""
        npc = npc_manager.create_relationship("x")
        npc = npc_manager.record_interaction(npc, "ch2_resume", "Met at a fair", at=1)
        npc = npc_manager.record_interaction(npc, "ch2_resume", None, at=2)
        assert npc.shared_history == ["ch2_resume"]
        assert npc.metadata.memories == ["Met at a fair"]
        assert npc.metadata.last_meet_at == 2


class TestApplyInteractions:
    """Tests for applying a consequence's interactions to a context."""

    def test_creates_and_updates(self):
        """Unknown NPCs are created, then trust and shift applied in order."""
        context = NarrativeContext()
        interactions = [
            NPCInteraction(npcId="arun", trustDelta=30, memory="Referred you."),
            NPCInteraction(npcId="kabir", attitudeShift="hostile"),
        ]
        updated = npc_manager.apply_interactions(interactions, context, "ch2_apply", at=3)

        assert context.npc_relationships == {}
        arun = updated.npc_relationships["arun"]
        assert arun.trust_level == 30
        assert arun.attitude == NPCAttitude.NEUTRAL
        assert arun.shared_history == ["ch2_apply"]
        assert updated.npc_relationships["kabir"].attitude_locked

    def test_trust_then_shift_in_same_interaction(self):
        """An explicit shift wins over the trust change in the same interaction."""
        updated = npc_manager.apply_interactions(
            [NPCInteraction(npcId="m", trustDelta=50, attitudeShift="mentor")],
            NarrativeContext(),
            "s",
        )
        npc = updated.npc_relationships["m"]
        assert npc.attitude == NPCAttitude.MENTOR
        assert npc.attitude_locked

    def test_no_interactions_returns_same_context(self):
        """Nothing to apply returns the input."""
        context = NarrativeContext()
        assert npc_manager.apply_interactions(None, context, "s") is context


class TestDecay:
    """Tests for trust decay."""

    def test_decay_is_monotonic(self):
        """Decay never raises trust and re-infers unlocked attitudes."""
        context = npc_manager.apply_interactions(
            [NPCInteraction(npcId="a", trustDelta=50), NPCInteraction(npcId="b", trustDelta=26)],
            NarrativeContext(),
            "s",
        )
        decayed = npc_manager.decay_relationships(context, 0.9)
        for npc_id, npc in decayed.npc_relationships.items():
            assert npc.trust_level <= context.npc_relationships[npc_id].trust_level
        assert decayed.npc_relationships["a"].trust_level == pytest.approx(45)
        assert decayed.npc_relationships["a"].attitude == NPCAttitude.NEUTRAL
        assert decayed.npc_relationships["b"].attitude == NPCAttitude.HOSTILE

    def test_factor_one_is_noop(self):
        """A factor of 1 changes nothing."""
        context = NarrativeContext()
        assert npc_manager.decay_relationships(context, 1) is context

    @pytest.mark.parametrize("factor", [0, -0.5, 1.5])
    def test_factor_out_of_range(self, factor):
        """Factors outside (0, 1] are rejected."""
        with pytest.raises(ValueError):
            npc_manager.decay_relationships(NarrativeContext(), factor)


class TestStanding:
    """Tests for relationship predicates."""

    def test_good_standing_and_mentor(self):
        """Good standing needs trust and a non-hostile attitude."""
        npc = npc_manager.create_relationship("x", initial_trust=80)
        assert npc_manager.has_good_standing(npc)
        assert npc_manager.has_mentor_relationship(npc)

        hostile = npc_manager.set_attitude(npc, "hostile")
        assert not npc_manager.has_good_standing(hostile)
        assert not npc_manager.has_mentor_relationship(hostile)

    def test_summary(self):
        """Summaries list each NPC's trust and attitude."""
        context = npc_manager.apply_interactions(
            [NPCInteraction(npcId="a", trustDelta=50)], NarrativeContext(), "s"
        )
        assert npc_manager.relationships_summary(context) == [
            {"npcId": "a", "name": "a", "trust": 50, "attitude": "friendly"}
        ]
