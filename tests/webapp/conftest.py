"""Pytest fixtures for webapp tests."""

from pathlib import Path

import pytest

from careersim.content.store import ContentStore
from careersim.webapp import create_app
from careersim.webapp.config import TestConfig
from careersim.webapp.extensions import db

CONTENT_DIR = Path(__file__).parent.parent.parent / "content" / "scenarios"


@pytest.fixture(scope="session")
def shipped_store():
    """Content store loaded once from the shipped scenarios."""
    return ContentStore.from_directory(CONTENT_DIR)


@pytest.fixture
def app(shipped_store):
    """Create test application over the shipped content."""
    app = create_app(TestConfig, store=shipped_store)
    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def session_id(client):
    """Create a session with no role and return its id."""
    response = client.post("/api/session", json={"playerId": "player-1"})
    return response.get_json()["session"]["sessionId"]


@pytest.fixture
def analyst_session_id(client):
    """Create an analyst session and return its id."""
    response = client.post("/api/session", json={"roleChoice": "analyst"})
    return response.get_json()["session"]["sessionId"]
