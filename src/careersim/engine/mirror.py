"""Career Mirror: an end-of-run reflection derived from a session.

The mirror is a pure function of the session. It is recomputed on demand and
never written back.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Callable

from careersim.models.state import ActionRecord, PlayerSession, StateVector
from careersim.parameters import KEY_MOMENT_LIMIT


@dataclass(frozen=True)
class Archetype:
    name: str
    description: str
    check: Callable[[StateVector], bool] = field(repr=False, compare=False)


# First match wins, so order matters.
ARCHETYPES: list[Archetype] = [
    Archetype(
        "The Trailblazer",
        "High confidence and engineering spirit. You charge forward, solving "
        "technical debt and corporate politics with equal fervor.",
        lambda sv: sv.confidence >= 0.7 and sv.engineering >= 0.6,
    ),
    Archetype(
        "The Diplomat",
        "Strong stakeholder management and communication. You build bridges and "
        "ensure alignment across the organization.",
        lambda sv: sv.stakeholder >= 0.6 and sv.communication >= 0.6,
    ),
    Archetype(
        "The Strategist",
        "High reputation and methodical problem solving. You see the board three "
        "moves ahead, optimizing for long-term growth.",
        lambda sv: sv.reputation >= 0.7 and sv.problem >= 0.6,
    ),
    Archetype(
        "The Survivor",
        "Low work-life balance, but high resilience. You've weathered intensive "
        "periods of work and kept the machinery running.",
        lambda sv: sv.worklife <= 0.4 and sv.health >= 0.4,
    ),
    Archetype(
        "The Architect",
        "Deep technical focus on SQL, Python, and Cloud. You don't just use tools; "
        "you build the systems that define the future.",
        lambda sv: sv.sql >= 0.7 and sv.cloud >= 0.6,
    ),
    Archetype(
        "The Climber",
        "Reputation above all. You optimized for leadership and visibility. Whether "
        "that's ambition or politics depends on who's watching.",
        lambda sv: sv.reputation >= 0.8 and sv.leadership >= 0.5,
    ),
    Archetype(
        "The Specialist",
        "Hyper-focused on ML and Statistics. You are the deep-thinker of the team, "
        "solving the problems nobody else can touch.",
        lambda sv: sv.ml >= 0.7 and sv.statistics >= 0.7,
    ),
    Archetype(
        "The Burnout",
        "Work-life balance and health have reached critical lows. This path isn't "
        "sustainable, and deep down, you know it.",
        lambda sv: sv.worklife <= 0.2 or sv.health <= 0.2,
    ),
]

DEFAULT_ARCHETYPE = Archetype(
    "The Journeyer",
    "No single trait dominates. You've walked a balanced path, a little of "
    "everything, master of the middle ground. That's not indecision. "
    "That's adaptability.",
    lambda sv: True,
)

ACTION_LABELS: dict[str, str] = {
    "resume_honest": "Chose honesty on your resume",
    "resume_fluff": "Padded your resume",
    "apply_mass": "Mass-applied to jobs",
    "apply_referral": "Leveraged your network for referrals",
    "offer_negotiate": "Negotiated your offer",
    "offer_reject": "Walked away from an offer",
    "ethics_speak_up": "Spoke up about an ethical concern",
    "ethics_quiet": "Stayed quiet on an ethical issue",
    "cross_leave": "Decided to leave for something new",
    "cross_entrepreneurship": "Chose to go independent",
    "cross_stay": "Chose stability over change",
    "routine_check_out": "Quietly disengaged from work",
    "growth_side_project": "Built something on the side",
}

SCENE_LANDMARKS: dict[str, str] = {
    "entry": "Fresh start",
    "role_selection": "Direction chosen",
    "ch1_setup_background": "Where it began",
    "ch2_resume": "First compromise?",
    "ch2_interview": "Moment of truth",
    "ch2_offer": "First real stakes",
    "ch3_day_one": "Reality check",
    "ch3_team": "People politics",
    "ch3_checkin": "Under the microscope",
    "ch4_routine": "The grind",
    "ch4_ethics": "Defining moment",
    "ch4_crossroads": "Crossroads",
    "ch4_mirror": "Reflection",
}


@dataclass
class MirrorResult:
    total_decisions: int
    chapters_completed: int
    dominant_trait: str
    trait_scores: dict[str, int]
    archetype: str
    archetype_description: str
    key_moments: list[str]
    emotional_journey: list[str]

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "totalDecisions": data["total_decisions"],
            "chaptersCompleted": data["chapters_completed"],
            "dominantTrait": data["dominant_trait"],
            "traitScores": data["trait_scores"],
            "archetype": data["archetype"],
            "archetypeDescription": data["archetype_description"],
            "keyMoments": data["key_moments"],
            "emotionalJourney": data["emotional_journey"],
        }


def _percent(value: float) -> int:
    return int(round(value * 100))


def trait_scores(sv: StateVector) -> dict[str, int]:
    """Six headline traits on a 0-100 scale."""
    return {
        "Confidence": _percent(sv.confidence),
        "Reputation": _percent(sv.reputation),
        "Work-Life": _percent(sv.worklife),
        "Technical": _percent((sv.sql + sv.python + sv.ml) / 3),
        "SoftSkills": _percent((sv.communication + sv.stakeholder + sv.leadership) / 3),
        "Financials": 100 if sv.savings > 0 else 0,
    }


def match_archetype(sv: StateVector) -> Archetype:
    return next((a for a in ARCHETYPES if a.check(sv)), DEFAULT_ARCHETYPE)


def key_moments(history: list[ActionRecord]) -> list[str]:
    moments = [ACTION_LABELS[r.action] for r in history if r.action in ACTION_LABELS]
    return moments[-KEY_MOMENT_LIMIT:]


def emotional_journey(history: list[ActionRecord]) -> list[str]:
    return [SCENE_LANDMARKS[r.scene] for r in history if r.scene in SCENE_LANDMARKS]


def generate_mirror(session: PlayerSession) -> MirrorResult:
    """Summarize a run: decisions, traits, archetype and landmarks."""
    sv = session.state_vector
    scores = trait_scores(sv)
    # Ties keep declaration order.
    dominant = max(scores, key=lambda name: scores[name])
    archetype = match_archetype(sv)
    return MirrorResult(
        total_decisions=len(session.action_history),
        chapters_completed=session.current_chapter,
        dominant_trait=dominant,
        trait_scores=scores,
        archetype=archetype.name,
        archetype_description=archetype.description,
        key_moments=key_moments(session.action_history),
        emotional_journey=emotional_journey(session.action_history),
    )
