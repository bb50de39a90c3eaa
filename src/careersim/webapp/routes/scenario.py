"""Scenario content routes."""

from flask import Blueprint, jsonify, request

from ..services.session_service import get_session_service
from .errors import error_response

bp = Blueprint("scenario", __name__, url_prefix="/api")


@bp.route("/scenarios")
def index():
    """List loaded scenarios with the roles that have overlays."""
    store = get_session_service().store
    return jsonify({"scenarios": store.list_scenarios()})


@bp.route("/scenario/<scenario_id>")
def view(scenario_id: str):
    """Merged scenario for an optional role; unknown roles get the base template."""
    store = get_session_service().store
    scenario = store.get_merged_scenario(scenario_id, request.args.get("role") or None)
    if scenario is None:
        return error_response("Scenario not found", 404, scenarioId=scenario_id)
    return jsonify(scenario.to_dict())
