"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with all blueprints, error handlers and the shared
ClusterGateway.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

import requests
from flask import Flask

from cbgateway.api.helpers import GATEWAY_EXTENSION
from cbgateway.config import AppConfig, load_settings
from cbgateway.core.couchbase import ClusterGateway


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(
    cfg: Optional[AppConfig] = None,
    gateway: Optional[ClusterGateway] = None,
    session: Optional[requests.Session] = None,
) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings (defaults to load_settings())
        gateway: Pre-built gateway (tests pass a stub)
        session: HTTP session for the gateway when it is built here
    """
    cfg = cfg or load_settings()
    _configure_logging(cfg.log_level)

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.json.sort_keys = False
    app.config.setdefault(
        "OPENAPI_SPEC_PATH",
        str(Path(app.root_path).parent / "openapi" / "gateway_openapi.yaml"),
    )

    # One gateway (and HTTP session) per process, shared by all requests
    app.extensions[GATEWAY_EXTENSION] = gateway or ClusterGateway(cfg.cluster, session=session)

    # Register blueprints
    from cbgateway.api import buckets, docs, errors, health, users

    app.register_blueprint(health.bp)
    app.register_blueprint(docs.bp)
    app.register_blueprint(buckets.bp)
    app.register_blueprint(users.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    app.logger.info("Couchbase admin gateway ready (cluster=%s)", cfg.couchbase_host)
    if not cfg.auth_enabled:
        app.logger.warning("Inbound authentication disabled (AUTH_ENABLED=false)")

    return app


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("cbgateway").setLevel(level)


if __name__ == "__main__":
    settings = load_settings()
    create_app(settings).run(host=settings.host, port=settings.port, debug=False)
