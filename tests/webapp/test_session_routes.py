"""Tests for the session API."""

import pytest

from careersim.content.schemas import ScenarioTemplate
from careersim.content.store import ContentStore
from careersim.webapp import create_app
from careersim.webapp.config import TestConfig
from careersim.webapp.extensions import db
from careersim.webapp.services.session_service import EXTENSION_KEY

pytestmark = pytest.mark.webapp


def submit(client, session_id, scenario_id, action_id):
    return client.patch(
        f"/api/session/{session_id}/action",
        json={"scenarioId": scenario_id, "actionId": action_id},
    )


def test_create_session(client):
    """Test a new session starts at chapter 0 with the default state vector."""
    response = client.post(
        "/api/session",
        json={"playerId": "p1", "roleChoice": "analyst", "experienceLevel": "early_1_3"},
    )
    assert response.status_code == 201
    session = response.get_json()["session"]
    assert session["currentChapter"] == 0
    assert session["currentScene"] == "entry"
    assert session["roleChoice"] == "analyst"
    assert session["stateVector"]["confidence"] == 0.5
    assert session["stateVector"]["emotionalState"] == "calm"
    assert session["actionHistory"] == []


def test_create_session_without_body(client):
    """Test an empty body creates an anonymous session."""
    response = client.post("/api/session")
    assert response.status_code == 201
    assert response.get_json()["session"]["playerId"] is None


def test_create_session_rejects_unknown_role(client):
    """Test classification values are validated."""
    response = client.post("/api/session", json={"roleChoice": "astronaut"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid request"


def test_load_session(client, session_id):
    """Test a created session can be loaded."""
    response = client.get(f"/api/session/{session_id}")
    assert response.status_code == 200
    assert response.get_json()["session"]["sessionId"] == session_id


def test_load_missing_session(client):
    """Test unknown session ids give 404."""
    response = client.get("/api/session/does-not-exist")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Session not found", "sessionId": "does-not-exist"}


def test_submit_action(client, session_id):
    """Test submitting an action returns feedback and the updated session."""
    response = submit(client, session_id, "ch1_setup_background", "bg_fresher")
    assert response.status_code == 200
    data = response.get_json()
    assert data["narrative"].startswith("Everyone starts somewhere.")
    assert data["entryConditionsMet"] is True

    session = data["session"]
    assert session["sceneCompleted"] is True
    assert len(session["actionHistory"]) == 1
    assert session["stateVector"]["emotionalState"] == "anxious"
    assert session["stateVector"]["confidence"] == pytest.approx(0.45)

    # The update is persisted
    stored = client.get(f"/api/session/{session_id}").get_json()["session"]
    assert stored == session


def test_submit_action_missing_fields(client, session_id):
    """Test scenarioId and actionId are required."""
    response = client.patch(f"/api/session/{session_id}/action", json={"scenarioId": "x"})
    assert response.status_code == 400
    assert "actionId" in response.get_json()["error"]


def test_submit_action_failure_leaves_session_unchanged(client, session_id):
    """Test a failed resolution does not modify the stored session."""
    before = client.get(f"/api/session/{session_id}").get_json()["session"]

    assert submit(client, session_id, "no_such_scene", "x").status_code == 400
    assert submit(client, session_id, "ch1_setup_background", "bg_nope").status_code == 400
    assert submit(client, session_id, "ch2_resume", "resume_ai_polish").status_code == 400

    after = client.get(f"/api/session/{session_id}").get_json()["session"]
    assert after == before


def test_submit_action_unknown_session(client):
    """Test submitting against an unknown session gives 404."""
    assert submit(client, "ghost", "ch1_setup_background", "bg_fresher").status_code == 404


def test_missing_feedback_variant_is_server_error(template_dict):
    """Test inconsistent content surfaces as a 500, not a crash."""
    template_dict["consequenceRules"][0]["immediateFeedback"] = "fb_gone"
    store = ContentStore()
    store.add_template(ScenarioTemplate.model_validate(template_dict))
    app = create_app(TestConfig, store=store)
    with app.app_context():
        db.create_all()
        client = app.test_client()
        session_id = client.post("/api/session").get_json()["session"]["sessionId"]
        response = submit(client, session_id, "test_scene", "a1")
        assert response.status_code == 500
        assert client.get(f"/api/session/{session_id}").get_json()["session"]["actionHistory"] == []
        db.drop_all()


def test_available_actions_respect_lockout(client, session_id):
    """Test listing hides invisible and locked-out actions."""
    url = f"/api/session/{session_id}/scenario/ch2_resume/actions"
    ids = [a["actionId"] for a in client.get(url).get_json()["actions"]]
    assert ids == ["resume_honest", "resume_fluff"]

    submit(client, session_id, "ch2_resume", "resume_fluff")
    ids = [a["actionId"] for a in client.get(url).get_json()["actions"]]
    assert ids == ["resume_fluff"]


def test_session_scenario_view_follows_branch(client, session_id):
    """Test the session view of a scenario switches to its branch variant."""
    url = f"/api/session/{session_id}/scenario/ch4_ethics"
    assert client.get(url).get_json()["scenario"]["branchId"] is None

    response = submit(client, session_id, "ch2_apply", "apply_referral")
    assert response.get_json()["session"]["narrativeContext"]["narrativeFlags"] == {
        "has_referral": True
    }

    scenario = client.get(url).get_json()["scenario"]
    assert scenario["branchId"] == "arun_in_the_room"
    assert scenario["npcMessage"].startswith("Whatever you decide")
    assert submit(client, session_id, "ch4_ethics", "ethics_quiet").get_json()["branchId"] == (
        "arun_in_the_room"
    )


def test_session_scenario_view_unknown_scenario(client, session_id):
    """Test an unknown scenario id is rejected like a bad submission."""
    response = client.get(f"/api/session/{session_id}/scenario/nope")
    assert response.status_code == 400
    assert response.get_json()["scenarioId"] == "nope"


def test_session_locks_released(app, client, session_id):
    """Test per-session locks do not outlive the requests that use them."""
    submit(client, session_id, "ch2_resume", "resume_fluff")
    service = app.extensions[EXTENSION_KEY]
    assert session_id not in service._locks


def test_event_flow(client, session_id):
    """Test due events can be fetched and acknowledged exactly once."""
    submit(client, session_id, "ch2_resume", "resume_fluff")

    events = client.get(f"/api/session/{session_id}/events").get_json()["events"]
    assert [e["eventType"] for e in events] == ["interruption"]
    assert events[0]["payload"]["sceneOrigin"] == "ch2_resume"

    ack_url = f"/api/session/{session_id}/events/ack"
    event_ids = [events[0]["eventId"]]
    first = client.post(ack_url, json={"eventIds": event_ids}).get_json()["session"]
    second = client.post(ack_url, json={"eventIds": event_ids}).get_json()["session"]
    assert first["appliedEvents"] == event_ids
    assert second == first
    assert client.get(f"/api/session/{session_id}/events").get_json()["events"] == []


def test_ack_requires_event_ids(client, session_id):
    """Test eventIds must be a list of strings."""
    response = client.post(f"/api/session/{session_id}/events/ack", json={"eventIds": "e1"})
    assert response.status_code == 400


def test_resume_clears_pending_events_of_active_scene(client, session_id):
    """Test mid-scene resume drops the active scene's pending timers only."""
    submit(client, session_id, "ch2_resume", "resume_fluff")
    client.patch(f"/api/session/{session_id}/scene", json={"scene": "ch2_resume", "chapter": 2})

    session = client.post(f"/api/session/{session_id}/resume").get_json()["session"]
    assert session["eventQueue"] == []

    again = client.post(f"/api/session/{session_id}/resume").get_json()["session"]
    assert again == session


def test_resume_after_completed_scene_keeps_events(client, session_id):
    """Test resume is a no-op once the scene is completed."""
    submit(client, session_id, "ch2_resume", "resume_fluff")
    session = client.post(f"/api/session/{session_id}/resume").get_json()["session"]
    assert len(session["eventQueue"]) == 2


def test_advance_scene(client, session_id):
    """Test advancing sets the scene and chapter and reopens the scene."""
    submit(client, session_id, "ch1_setup_background", "bg_early")
    response = client.patch(
        f"/api/session/{session_id}/scene", json={"scene": "ch2_resume", "chapter": 2}
    )
    assert response.status_code == 200
    session = response.get_json()["session"]
    assert session["currentScene"] == "ch2_resume"
    assert session["currentChapter"] == 2
    assert session["sceneCompleted"] is False


@pytest.mark.parametrize("body", [{}, {"scene": "x", "chapter": -1}, {"scene": "x", "chapter": "2"}])
def test_advance_scene_validation(client, session_id, body):
    """Test the scene is required and the chapter must be a non-negative integer."""
    response = client.patch(f"/api/session/{session_id}/scene", json=body)
    assert response.status_code == 400


def test_mirror(client, session_id):
    """Test the mirror summarizes the run without changing the session."""
    submit(client, session_id, "ch1_setup_background", "bg_fresher")
    submit(client, session_id, "ch2_resume", "resume_fluff")

    mirror = client.get(f"/api/session/{session_id}/mirror").get_json()["mirror"]
    assert mirror["totalDecisions"] == 2
    assert mirror["keyMoments"] == ["Padded your resume"]
    assert mirror["emotionalJourney"] == ["Where it began", "First compromise?"]
    assert client.get(f"/api/session/{session_id}").get_json()["session"]["careerMirror"] is None
