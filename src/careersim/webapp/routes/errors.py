"""JSON error responses for engine and request errors."""

import logging

from flask import Flask, jsonify
from pydantic import ValidationError

from careersim.errors import (
    ActionNotFound,
    FeedbackVariantMissing,
    ScenarioNotFound,
    SessionNotFound,
)

logger = logging.getLogger(__name__)


class BadRequest(Exception):
    """Malformed request body or query."""


def error_response(message: str, status: int, **extra):
    return jsonify({"error": message, **extra}), status


def register_error_handlers(app: Flask) -> None:
    """Map the engine's error taxonomy onto HTTP status codes."""

    @app.errorhandler(SessionNotFound)
    def session_not_found(e: SessionNotFound):
        return error_response("Session not found", 404, sessionId=e.session_id)

    @app.errorhandler(ScenarioNotFound)
    def scenario_not_found(e: ScenarioNotFound):
        return error_response(str(e), 400, scenarioId=e.scenario_id)

    @app.errorhandler(ActionNotFound)
    def action_not_found(e: ActionNotFound):
        return error_response(str(e), 400, scenarioId=e.scenario_id, actionId=e.action_id)

    @app.errorhandler(FeedbackVariantMissing)
    def feedback_missing(e: FeedbackVariantMissing):
        logger.error(f"Content integrity failure: {e}")
        return error_response("Scenario content is inconsistent", 500)

    @app.errorhandler(BadRequest)
    def bad_request(e: BadRequest):
        return error_response(str(e), 400)

    @app.errorhandler(ValidationError)
    def invalid_value(e: ValidationError):
        details = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        return error_response("Invalid request", 400, details=details)
