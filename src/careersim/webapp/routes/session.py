"""Session routes - the core game loop API."""

from flask import Blueprint, jsonify, request

from ..services.session_service import get_session_service
from .errors import BadRequest

bp = Blueprint("session", __name__, url_prefix="/api/session")


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def _require_str(body: dict, key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value:
        raise BadRequest(f"'{key}' is required")
    return value


@bp.route("", methods=["POST"])
def create():
    """Create a session with the default state vector."""
    body = _json_body()
    session = get_session_service().create_session(
        player_id=body.get("playerId"),
        role_choice=body.get("roleChoice"),
        experience_level=body.get("experienceLevel"),
        mindset_bias=body.get("mindsetBias"),
    )
    return jsonify({"session": session.to_dict()}), 201


@bp.route("/<session_id>")
def load(session_id: str):
    session = get_session_service().get_session(session_id)
    return jsonify({"session": session.to_dict()})


@bp.route("/<session_id>/action", methods=["PATCH"])
def submit_action(session_id: str):
    """Resolve and apply one action, returning the feedback text."""
    body = _json_body()
    scenario_id = _require_str(body, "scenarioId")
    action_id = _require_str(body, "actionId")

    session, result = get_session_service().submit_action(session_id, scenario_id, action_id)
    return jsonify(
        {
            "session": session.to_dict(),
            "narrative": result.narrative,
            "audioCue": result.audio_cue,
            "entryConditionsMet": result.entry_conditions_met,
            "branchId": result.branch_id,
        }
    )


@bp.route("/<session_id>/scenario/<scenario_id>")
def scenario(session_id: str, scenario_id: str):
    """Scenario as this session sees it, branch variant included."""
    merged = get_session_service().get_scenario(session_id, scenario_id)
    return jsonify({"scenario": merged.to_dict()})


@bp.route("/<session_id>/scenario/<scenario_id>/actions")
def available_actions(session_id: str, scenario_id: str):
    """Actions this session can currently see in a scenario."""
    actions = get_session_service().list_actions(session_id, scenario_id)
    return jsonify({"actions": [a.to_dict() for a in actions]})


@bp.route("/<session_id>/events")
def events(session_id: str):
    """Due, unapplied pending events."""
    due = get_session_service().pending_events(session_id)
    return jsonify({"events": [e.to_dict() for e in due]})


@bp.route("/<session_id>/events/ack", methods=["POST"])
def acknowledge_events(session_id: str):
    """Mark delivered events as applied."""
    body = _json_body()
    event_ids = body.get("eventIds")
    if not isinstance(event_ids, list) or not all(isinstance(i, str) for i in event_ids):
        raise BadRequest("'eventIds' must be a list of strings")

    session = get_session_service().acknowledge_events(session_id, event_ids)
    return jsonify({"session": session.to_dict()})


@bp.route("/<session_id>/resume", methods=["POST"])
def resume(session_id: str):
    """Mid-scene resume: clears pending timers scoped to the active scene."""
    session = get_session_service().resume(session_id)
    return jsonify({"session": session.to_dict()})


@bp.route("/<session_id>/scene", methods=["PATCH"])
def advance(session_id: str):
    """Move the session to the next scene."""
    body = _json_body()
    scene = _require_str(body, "scene")
    chapter = body.get("chapter")
    if chapter is not None and (
        isinstance(chapter, bool) or not isinstance(chapter, int) or chapter < 0
    ):
        raise BadRequest("'chapter' must be a non-negative integer")

    session = get_session_service().advance(session_id, scene, chapter)
    return jsonify({"session": session.to_dict()})


@bp.route("/<session_id>/mirror")
def mirror(session_id: str):
    """End-of-run reflection derived from the session."""
    result = get_session_service().mirror(session_id)
    return jsonify({"mirror": result.to_dict()})
