"""RBAC user and role endpoints."""
from __future__ import annotations

from flask import Blueprint

from cbgateway.api.decorators import require_basic_auth
from cbgateway.api.helpers import envelope, get_gateway, json_body
from cbgateway.core import resource_service
from cbgateway.core.models import CreateUserRequest, roles_from_list

bp = Blueprint("users", __name__)
bp.before_request(require_basic_auth)


@bp.route("/users", methods=["POST"])
def create_user():
    """Create a local user.

    Validation failures and duplicates return 200 with success=false; the
    password is never echoed back.
    """
    request_model = CreateUserRequest.from_dict(json_body())
    return envelope(resource_service.create_user(get_gateway(), request_model))


@bp.route("/users", methods=["GET"])
def list_users():
    return envelope(resource_service.list_users(get_gateway()))


@bp.route("/users/<username>", methods=["GET"])
def get_user(username: str):
    return envelope(resource_service.get_user(get_gateway(), username))


@bp.route("/users/<username>", methods=["DELETE"])
def delete_user(username: str):
    return envelope(resource_service.delete_user(get_gateway(), username))


@bp.route("/users/<username>/roles", methods=["PUT"])
def update_user_roles(username: str):
    """Replace the user's roles with the JSON array in the body."""
    roles = roles_from_list(json_body())
    return envelope(resource_service.update_user_roles(get_gateway(), username, roles))


@bp.route("/users/<username>/permissions", methods=["GET"])
def get_user_permissions(username: str):
    return envelope(resource_service.get_user_permissions(get_gateway(), username))


@bp.route("/roles", methods=["GET"])
def get_available_roles():
    return envelope(resource_service.available_roles())
