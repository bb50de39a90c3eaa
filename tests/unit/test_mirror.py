"""Unit tests for careersim.engine.mirror."""

from datetime import datetime, timezone

from careersim.engine.mirror import generate_mirror, key_moments, match_archetype, trait_scores
from careersim.models.state import ActionRecord, StateVector

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def record(scene, action):
    return ActionRecord(scene=scene, action=action, timestamp=NOW)


class TestTraitScores:
    """Tests for the headline trait scores."""

    def test_default_vector(self):
        """Scores are percentages of the underlying axes."""
        assert trait_scores(StateVector()) == {
            "Confidence": 50,
            "Reputation": 30,
            "Work-Life": 70,
            "Technical": 0,
            "SoftSkills": 10,
            "Financials": 0,
        }

    def test_financials_flag(self):
        """Any savings count as full financial standing."""
        assert trait_scores(StateVector(savings=0.05))["Financials"] == 100


class TestArchetype:
    """Tests for archetype matching."""

    def test_first_match_wins(self):
        """Archetypes are checked in order."""
        sv = StateVector(confidence=0.9, engineering=0.9, worklife=0.1)
        assert match_archetype(sv).name == "The Trailblazer"

    def test_burnout(self):
        """Critically low health gives the burnout archetype."""
        assert match_archetype(StateVector(health=0.1)).name == "The Burnout"

    def test_default(self):
        """Balanced vectors fall back to the journeyer."""
        assert match_archetype(StateVector()).name == "The Journeyer"


class TestGenerateMirror:
    """Tests for the full mirror."""

    def test_mirror_for_session(self, session):
        """The mirror summarizes decisions, traits and landmarks."""
        session.action_history = [
            record("ch1_setup_background", "bg_fresher"),
            record("ch2_resume", "resume_fluff"),
            record("ch4_ethics", "ethics_speak_up"),
        ]
        session.current_chapter = 4
        mirror = generate_mirror(session)

        assert mirror.total_decisions == 3
        assert mirror.chapters_completed == 4
        assert mirror.dominant_trait == "Work-Life"
        assert mirror.archetype == "The Journeyer"
        assert mirror.key_moments == ["Padded your resume", "Spoke up about an ethical concern"]
        assert mirror.emotional_journey == ["Where it began", "First compromise?", "Defining moment"]

        data = mirror.to_dict()
        assert data["totalDecisions"] == 3
        assert data["traitScores"]["Confidence"] == 50
        assert session.career_mirror is None

    def test_key_moments_keep_latest(self):
        """Only the most recent key moments are kept."""
        history = [record("s", "resume_honest")] * 4 + [record("s", "apply_mass")] * 4
        moments = key_moments(history)
        assert len(moments) == 6
        assert moments[-1] == "Mass-applied to jobs"
        assert moments[0] == "Chose honesty on your resume"
