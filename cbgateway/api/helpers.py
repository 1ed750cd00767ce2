"""Request/response helpers shared by the resource blueprints."""
from __future__ import annotations
from typing import Any

from flask import current_app, jsonify, request

from cbgateway.core.couchbase import ClusterGateway
from cbgateway.core.models import ApiResponse, RequestValidationError

GATEWAY_EXTENSION = "cluster_gateway"


def get_gateway() -> ClusterGateway:
    """Return the ClusterGateway built once in create_app()."""
    return current_app.extensions[GATEWAY_EXTENSION]


def json_body() -> Any:
    """Decode the request body as JSON.

    Raises:
        RequestValidationError: If the body is missing or not valid JSON
    """
    payload = request.get_json(silent=True)
    if payload is None:
        raise RequestValidationError("Request body must be valid JSON")
    return payload


def envelope(result: ApiResponse):
    """Serialize a handler result as 200; business-rule rejections included."""
    return jsonify(result.to_dict()), 200
