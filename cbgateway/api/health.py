"""Liveness and readiness endpoints. Neither calls the cluster."""
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from cbgateway import __version__
from cbgateway.api.helpers import GATEWAY_EXTENSION

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }), 200


@bp.route("/ready")
def readiness_check():
    """Ready once create_app() has attached a cluster gateway."""
    if GATEWAY_EXTENSION not in current_app.extensions:
        return ("gateway not configured", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
