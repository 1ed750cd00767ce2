"""
Inbound HTTP Basic authentication.

Credentials are compared in constant time against the configured gateway
username and password. Blueprints opt in with ``bp.before_request(require_basic_auth)``.
"""
import hmac
import logging
from typing import Optional

from flask import current_app, request

from cbgateway.api.errors import error_response

logger = logging.getLogger(__name__)

AUTH_CHALLENGE = {"WWW-Authenticate": 'Basic realm="couchbase-admin-gateway"'}


def check_credentials(username: Optional[str], password: Optional[str], cfg) -> bool:
    """Return True when the pair matches the configured credentials."""
    if username is None or password is None:
        return False
    user_ok = hmac.compare_digest(username.encode("utf-8"), cfg.auth_username.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), cfg.auth_password.encode("utf-8"))
    return user_ok and password_ok


def require_basic_auth():
    """before_request hook: reject the request with 401 unless Basic auth matches."""
    cfg = current_app.config["APP_CONFIG"]
    if not cfg.auth_enabled:
        return None

    if not request.headers.get("Authorization"):
        return error_response(401, "Missing Authorization header", AUTH_CHALLENGE)

    auth = request.authorization
    if auth is None or (auth.type or "").lower() != "basic":
        return error_response(401, "Invalid authorization type", AUTH_CHALLENGE)

    if not check_credentials(auth.username, auth.password, cfg):
        logger.info("Rejected credentials for user=%s path=%s", auth.username, request.path)
        return error_response(401, "Invalid credentials", AUTH_CHALLENGE)

    return None
