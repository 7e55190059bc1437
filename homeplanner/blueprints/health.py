"""Health check blueprint."""

from flask import Blueprint, Response, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Response:
    """Liveness probe used by the container platform."""
    return jsonify({"status": "ok", "service": "homeplanner"})
