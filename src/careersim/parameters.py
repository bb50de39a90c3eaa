"""Tunable constants for the CareerSim narrative engine.

This module is the single source of truth for numeric thresholds and defaults
shared by the content schemas, the NPC relationship manager and the state engine.

Parameter Categories:
- State Vector: Axis defaults and bounds
- NPC Relationships: Trust bounds, attitude thresholds, decay
- Content: Version format

Usage:
    from careersim.parameters import DEFAULT_STATE_VECTOR, MENTOR_TRUST_THRESHOLD
"""

import re

# =============================================================================
# STATE VECTOR PARAMETERS
# =============================================================================

AXIS_MIN = 0.0
AXIS_MAX = 1.0

DEFAULT_STATE_VECTOR: dict[str, float] = {
    # Core metrics
    "confidence": 0.5,
    "reputation": 0.3,
    "health": 0.8,
    "worklife": 0.7,
    "family": 0.8,
    # Financials
    "savings": 0.0,
    "salary": 0.0,
    "loan": 0.0,
    # Technical skills
    "sql": 0.0,
    "python": 0.0,
    "excel": 0.0,
    "powerbi": 0.0,
    "cloud": 0.0,
    "ml": 0.0,
    "statistics": 0.0,
    "engineering": 0.0,
    # Professional skills
    "communication": 0.2,
    "stakeholder": 0.1,
    "presentation": 0.1,
    "leadership": 0.0,
    "negotiation": 0.0,
    "problem": 0.2,
    # Behavioral
    "energy": 1.0,
    "riskTolerance": 0.5,
    "ethics": 0.7,
    "networkStrength": 0.2,
}
"""Starting value of every numeric axis, keyed by the content (camelCase) name."""

DEFAULT_EMOTIONAL_STATE = "calm"
"""Emotional state of a new session."""

CONDITION_EQ_TOLERANCE = 1e-9
"""Absolute tolerance for the `eq` condition operator on float axes."""

# =============================================================================
# NPC RELATIONSHIP PARAMETERS
# =============================================================================

TRUST_MIN = 0.0
TRUST_MAX = 100.0

MENTOR_TRUST_THRESHOLD = 75.0
FRIENDLY_TRUST_THRESHOLD = 50.0
NEUTRAL_TRUST_THRESHOLD = 25.0
"""Inferred attitude bands: >= 75 mentor, >= 50 friendly, >= 25 neutral, else hostile."""

GOOD_STANDING_TRUST = 50.0

DEFAULT_DECAY_FACTOR = 0.98
"""Multiplier applied to every NPC's trust per "time passing" step."""

MAX_INTERACTION_TRUST_DELTA = 50.0

DEFAULT_NPC_ROLE = "peer"

# =============================================================================
# CONTENT PARAMETERS
# =============================================================================

CONTENT_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
"""Content documents are versioned MAJOR.MINOR.PATCH."""

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_.-]+)\s*\}\}")
"""Narrative placeholder token, e.g. ``{{company}}``, filled by overlay swaps."""

# =============================================================================
# SESSION PARAMETERS
# =============================================================================

ENTRY_SCENE = "entry"

KEY_MOMENT_LIMIT = 6
"""Number of most recent labelled decisions the career mirror reports."""
