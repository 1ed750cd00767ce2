"""Input validation for resource requests.

Every check returns ``None`` when the input is acceptable and a human-readable
message otherwise. Nothing here raises or touches the network, so handlers
can run the whole validation before the first cluster call.
"""
from __future__ import annotations
import re
from typing import Iterable, Optional

from cbgateway.core import roles as role_taxonomy
from cbgateway.core.models import CreateUserRequest, Role

USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 8

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def validate_username(username: str) -> Optional[str]:
    """Username: non-empty, at least 3 chars, alphanumeric plus _ and -."""
    if not username:
        return "Username cannot be empty"
    if len(username) < USERNAME_MIN_LENGTH:
        return f"Username must be at least {USERNAME_MIN_LENGTH} characters long"
    if not USERNAME_PATTERN.fullmatch(username):
        return "Username can only contain alphanumeric characters, underscores, and hyphens"
    return None


def validate_password(password: str) -> Optional[str]:
    if not password:
        return "Password cannot be empty"
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    return None


def validate_role(role: Role) -> Optional[str]:
    """Check one role against the taxonomy and the scoping hierarchy."""
    if not role_taxonomy.is_valid_role(role.role_id):
        return (
            f"Invalid role: '{role.role_id}'. "
            f"Valid roles are: {list(role_taxonomy.ALL_ROLES)}"
        )
    if role_taxonomy.is_data_access_role(role.role_id) and role.bucket is None:
        return f"Data access role '{role.role_id}' requires a bucket to be specified"
    if role.scope is not None and role.bucket is None:
        return "Scope can only be specified when bucket is also specified"
    if role.collection is not None and role.scope is None:
        return "Collection can only be specified when scope is also specified"
    return None


def validate_roles(roles: Iterable[Role]) -> Optional[str]:
    """Validate a role list (used directly for role replacement)."""
    roles = list(roles)
    if not roles:
        return "At least one role must be specified"
    for role in roles:
        error = validate_role(role)
        if error:
            return error
    return None


def validate_create_user(request: CreateUserRequest) -> Optional[str]:
    """Validate a user creation request; first failing rule wins."""
    return (
        validate_username(request.username)
        or validate_password(request.password)
        or validate_roles(request.roles)
    )


def validate_resource_name(name: str, kind: str) -> Optional[str]:
    """Bucket, scope and collection names only need to be non-empty here."""
    if not name:
        return f"{kind} name cannot be empty"
    return None
