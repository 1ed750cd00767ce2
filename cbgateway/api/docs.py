"""OpenAPI description of the gateway, served as JSON.

The YAML document is parsed once per application and cached in
``app.extensions``. The version and server URL are filled in per request.
"""
from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml
from flask import Blueprint, Response, current_app, jsonify, request

from cbgateway import __version__

bp = Blueprint("docs", __name__)

_CACHE_KEY = "openapi_document"


def _document_path() -> Path:
    configured = current_app.config.get("OPENAPI_SPEC_PATH")
    if configured:
        return Path(configured)
    return Path(current_app.root_path).parent / "openapi" / "gateway_openapi.yaml"


def _load_document(path: Path) -> dict[str, Any]:
    """Parse the YAML document, reusing the cached copy for the same path.

    Raises:
        FileNotFoundError: If the document is missing (HTTP 500)
    """
    cached = current_app.extensions.get(_CACHE_KEY)
    if cached and cached[0] == path:
        return cached[1]
    if not path.is_file():
        raise FileNotFoundError(f"OpenAPI document not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        document = yaml.safe_load(handle) or {}
    current_app.extensions[_CACHE_KEY] = (path, document)
    return document


@bp.route("/openapi.json", methods=["GET"])
def openapi_document() -> Response:
    """Serve the OpenAPI document (no auth)."""
    document = copy.deepcopy(_load_document(_document_path()))
    document.setdefault("info", {})["version"] = __version__
    document["servers"] = [{"url": request.url_root.rstrip("/") or "/"}]
    return jsonify(document)
