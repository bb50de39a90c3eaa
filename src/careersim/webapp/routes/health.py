"""Health check route."""

from flask import Blueprint, jsonify

from ..services.session_service import get_session_service

bp = Blueprint("health", __name__)


@bp.route("/health")
def health():
    """Liveness check with the number of loaded scenarios."""
    service = get_session_service()
    return jsonify({"status": "ok", "scenarios": len(service.store)})
