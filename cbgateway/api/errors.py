"""Error handlers mapping gateway failures to the JSON envelope.

Status mapping:
    RequestValidationError           → 400
    NotFoundError                    → 404
    ClusterApiError / Transport      → 502
    HTTPException                    → its own code
    anything else                    → 500
"""
from __future__ import annotations

from flask import jsonify
from werkzeug.exceptions import HTTPException

from cbgateway.core.couchbase import ClusterApiError, ClusterTransportError, NotFoundError
from cbgateway.core.models import ApiResponse, RequestValidationError


def error_response(status: int, message: str, headers: dict | None = None):
    """Build a JSON response carrying a failure envelope."""
    response = jsonify(ApiResponse.error(message).to_dict())
    response.status_code = status
    if headers:
        response.headers.update(headers)
    return response


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(RequestValidationError)
    def handle_validation_error(error):
        return error_response(400, str(error))

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return error_response(404, str(error))

    @app.errorhandler(ClusterApiError)
    def handle_cluster_api_error(error):
        app.logger.warning("Upstream cluster error on %s: %s", error.endpoint, error)
        return error_response(502, str(error))

    @app.errorhandler(ClusterTransportError)
    def handle_transport_error(error):
        app.logger.warning("Cluster unreachable: %s", error)
        return error_response(502, str(error))

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return error_response(error.code or 500, error.description or error.name)

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return handle_http_exception(error)

        app.logger.error("Unhandled exception: %s", error, exc_info=True)
        return error_response(500, "Internal server error: an unexpected error occurred")
