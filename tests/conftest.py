"""Shared pytest fixtures and markers for all tests."""

import copy
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
CONTENT_DIR = PROJECT_ROOT / "content" / "scenarios"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks end-to-end tests over the shipped content"
    )
    config.addinivalue_line(
        "markers", "webapp: marks webapp-specific tests"
    )


# Minimal valid template used across tests. Tests copy and mutate it.
BASE_TEMPLATE = {
    "scenarioId": "test_scene",
    "contentVersion": "1.0.0",
    "chapter": 1,
    "title": "Test scene at {{company}}",
    "actions": [
        {"actionId": "a1", "label": "First choice"},
        {"actionId": "a2", "label": "Second choice", "locksOut": ["a1"]},
    ],
    "consequenceRules": [
        {
            "actionId": "a1",
            "stateDeltas": [
                {"variable": "confidence", "delta": 0.1},
                {"variable": "riskTolerance", "delta": -0.2},
            ],
            "immediateFeedback": "fb_a1",
        },
        {
            "actionId": "a2",
            "stateDeltas": [{"variable": "energy", "delta": -0.5}],
            "emotionalShift": {"to": "anxious"},
            "spawnedEvents": [
                {"eventType": "consequence", "delayTicks": 2, "payload": {"kind": "late"}},
                {"eventType": "interruption", "delayTicks": 0, "payload": {}},
            ],
            "npcInteractions": [
                {"npcId": "boss", "trustDelta": 30, "memory": "Picked a2."}
            ],
            "immediateFeedback": "fb_a2",
        },
    ],
    "feedbackVariants": [
        {"key": "fb_a1", "emotionalState": "*", "narrativeText": "You chose a1."},
        {"key": "fb_a1", "emotionalState": "anxious", "narrativeText": "Nervously, a1."},
        {"key": "fb_a2", "emotionalState": "*", "narrativeText": "You chose a2."},
    ],
}

ANALYST_OVERLAY = {
    "scenarioId": "test_scene",
    "contentVersion": "1.0.0",
    "role": "analyst",
    "overrides": {
        "consequenceRules": [
            {
                "actionId": "a1",
                "stateDeltas": [{"variable": "sql", "delta": 0.4}],
                "immediateFeedback": "fb_a1",
            }
        ],
        "narrativeSwaps": {"company": "Acme Analytics"},
    },
}


@pytest.fixture
def template_dict():
    """A fresh copy of a minimal valid template document."""
    return copy.deepcopy(BASE_TEMPLATE)


@pytest.fixture
def overlay_dict():
    """A fresh copy of an analyst overlay for template_dict."""
    return copy.deepcopy(ANALYST_OVERLAY)


@pytest.fixture
def store(template_dict, overlay_dict):
    """ContentStore holding the test template and its analyst overlay."""
    from careersim.content.schemas import RoleOverlay, ScenarioTemplate
    from careersim.content.store import ContentStore

    store = ContentStore()
    store.add_template(ScenarioTemplate.model_validate(template_dict))
    store.add_overlay(RoleOverlay.model_validate(overlay_dict))
    return store


@pytest.fixture
def session():
    """A fresh session with no role."""
    from careersim.models.state import create_session

    return create_session(session_id="session-1")


@pytest.fixture
def content_dir():
    """Directory of the shipped scenario content."""
    return CONTENT_DIR
