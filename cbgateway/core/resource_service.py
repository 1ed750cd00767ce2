"""Resource handlers: validation, existence checks and cluster writes.

This module is the layer between the HTTP blueprints and the cluster gateway.
Each handler takes an explicitly constructed ``ClusterGateway`` and returns an
``ApiResponse`` envelope.

Architecture:
    Blueprints (/buckets, /users, ...) ──> resource_service.py ──> ClusterGateway ──> Couchbase

Outcomes:
    - Business-rule rejections (invalid input, "already exists", missing
      ancestor) come back as ``ApiResponse(success=False, message=...)``.
    - Transport, upstream and lookup failures propagate as exceptions from
      ``cbgateway.core.couchbase.exceptions`` for the HTTP layer to map.

Existence checks run before every create. They are not atomic with the
create itself; a cluster rejection saying the resource already exists is
reported with the same envelope as the pre-check.
"""
from __future__ import annotations
import logging

from cbgateway.core import roles as role_taxonomy
from cbgateway.core import validators
from cbgateway.core.couchbase import (
    ClusterApiError,
    ClusterGateway,
    ScopeNotFoundError,
    UserNotFoundError,
)
from cbgateway.core.models import (
    ApiResponse,
    Bucket,
    Collection,
    CreateBucketRequest,
    CreateCollectionRequest,
    CreateScopeRequest,
    CreateUserRequest,
    Role,
    Scope,
    User,
    UserConfig,
    UserPermissions,
)

logger = logging.getLogger(__name__)


def _reject(message: str) -> ApiResponse:
    logger.info("Request rejected: %s", message)
    return ApiResponse.error(message)


# ─────────────────────────────────────────────────────────────────────────────
# Existence helpers
# ─────────────────────────────────────────────────────────────────────────────

def _bucket_exists(gateway: ClusterGateway, bucket: str) -> bool:
    return gateway.bucket_exists(bucket)


def _bucket_not_found(bucket: str) -> ApiResponse:
    return _reject(f"Bucket '{bucket}' not found")


def _scope_not_found(bucket: str, scope: str) -> ApiResponse:
    return _reject(f"Scope '{scope}' not found in bucket '{bucket}'")


# ─────────────────────────────────────────────────────────────────────────────
# Buckets
# ─────────────────────────────────────────────────────────────────────────────

def create_bucket(gateway: ClusterGateway, request: CreateBucketRequest) -> ApiResponse[Bucket]:
    """Create a bucket, applying defaults for unspecified settings."""
    error = validators.validate_resource_name(request.bucket_name, "Bucket")
    if error:
        return _reject(error)

    already_exists = f"Bucket '{request.bucket_name}' already exists"
    if _bucket_exists(gateway, request.bucket_name):
        return _reject(already_exists)

    config = request.to_config()
    try:
        gateway.create_bucket(config)
    except ClusterApiError as exc:
        if exc.is_already_exists:
            return _reject(already_exists)
        raise

    return ApiResponse.ok(Bucket.from_config(config))


def list_buckets(gateway: ClusterGateway) -> ApiResponse[list[Bucket]]:
    return ApiResponse.ok(gateway.list_buckets())


# ─────────────────────────────────────────────────────────────────────────────
# Scopes
# ─────────────────────────────────────────────────────────────────────────────

def create_scope(gateway: ClusterGateway, bucket: str, request: CreateScopeRequest) -> ApiResponse[Scope]:
    """Create a scope after checking the bucket exists and the name is free."""
    error = validators.validate_resource_name(request.scope_name, "Scope")
    if error:
        return _reject(error)

    if not _bucket_exists(gateway, bucket):
        return _bucket_not_found(bucket)

    already_exists = f"Scope '{request.scope_name}' already exists in bucket '{bucket}'"
    if any(scope.name == request.scope_name for scope in gateway.list_scopes(bucket)):
        return _reject(already_exists)

    try:
        gateway.create_scope(bucket, request.scope_name)
    except ClusterApiError as exc:
        if exc.is_already_exists:
            return _reject(already_exists)
        raise

    return ApiResponse.ok(Scope(name=request.scope_name, collections=[]))


def list_scopes(gateway: ClusterGateway, bucket: str) -> ApiResponse[list[Scope]]:
    if not _bucket_exists(gateway, bucket):
        return _bucket_not_found(bucket)
    return ApiResponse.ok(gateway.list_scopes(bucket))


# ─────────────────────────────────────────────────────────────────────────────
# Collections
# ─────────────────────────────────────────────────────────────────────────────

def create_collection(
    gateway: ClusterGateway,
    bucket: str,
    scope: str,
    request: CreateCollectionRequest,
) -> ApiResponse[Collection]:
    """Create a collection.

    Checks cascade bucket → scope → collection name; the first failure is
    returned and the collection endpoint is never called.
    """
    error = validators.validate_resource_name(request.collection_name, "Collection")
    if error:
        return _reject(error)

    if not _bucket_exists(gateway, bucket):
        return _bucket_not_found(bucket)

    try:
        existing = gateway.list_collections(bucket, scope)
    except ScopeNotFoundError:
        return _scope_not_found(bucket, scope)

    already_exists = (
        f"Collection '{request.collection_name}' already exists in scope '{scope}' of bucket '{bucket}'"
    )
    if any(collection.name == request.collection_name for collection in existing):
        return _reject(already_exists)

    try:
        gateway.create_collection(
            bucket,
            scope,
            request.collection_name,
            max_ttl=request.max_ttl,
            history=request.history,
        )
    except ClusterApiError as exc:
        if exc.is_already_exists:
            return _reject(already_exists)
        raise

    return ApiResponse.ok(Collection(
        name=request.collection_name,
        scope=scope,
        max_ttl=request.max_ttl,
        history=request.history,
    ))


def list_collections(gateway: ClusterGateway, bucket: str, scope: str) -> ApiResponse[list[Collection]]:
    if not _bucket_exists(gateway, bucket):
        return _bucket_not_found(bucket)
    try:
        return ApiResponse.ok(gateway.list_collections(bucket, scope))
    except ScopeNotFoundError:
        return _scope_not_found(bucket, scope)


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────

def _user_exists(gateway: ClusterGateway, username: str) -> bool:
    # Only a 404 means "absent"; any other failure propagates
    try:
        gateway.get_user(username)
    except UserNotFoundError:
        return False
    return True


def create_user(gateway: ClusterGateway, request: CreateUserRequest) -> ApiResponse[User]:
    """Create a local RBAC user.

    Validation runs completely before any cluster call. The password is sent
    to the cluster but never returned.
    """
    error = validators.validate_create_user(request)
    if error:
        return _reject(error)

    already_exists = f"User '{request.username}' already exists"
    if _user_exists(gateway, request.username):
        return _reject(already_exists)

    groups = list(dict.fromkeys(request.groups or []))
    config = UserConfig(
        username=request.username,
        password=request.password,
        roles=list(request.roles),
        groups=groups,
        display_name=request.display_name,
    )
    try:
        gateway.create_user(config)
    except ClusterApiError as exc:
        if exc.is_already_exists:
            return _reject(already_exists)
        raise

    return ApiResponse.ok(User(
        username=request.username,
        roles=list(request.roles),
        groups=groups,
        display_name=request.display_name,
    ))


def list_users(gateway: ClusterGateway) -> ApiResponse[list[User]]:
    return ApiResponse.ok(gateway.list_users())


def get_user(gateway: ClusterGateway, username: str) -> ApiResponse[User]:
    """Return one user; UserNotFoundError propagates (HTTP 404)."""
    return ApiResponse.ok(gateway.get_user(username))


def delete_user(gateway: ClusterGateway, username: str) -> ApiResponse[None]:
    """Delete one user; UserNotFoundError propagates (HTTP 404)."""
    gateway.delete_user(username)
    return ApiResponse.ok(message=f"User '{username}' deleted")


def update_user_roles(gateway: ClusterGateway, username: str, roles: list[Role]) -> ApiResponse[User]:
    """Replace a user's roles, keeping the password, groups and full name.

    Raises:
        UserNotFoundError: If the user does not exist
    """
    error = validators.validate_roles(roles)
    if error:
        return _reject(error)

    current = gateway.get_user(username)
    gateway.update_user(UserConfig(
        username=username,
        roles=list(roles),
        password=None,
        groups=list(current.groups),
        display_name=current.display_name,
    ))
    return ApiResponse.ok(User(
        username=username,
        roles=list(roles),
        groups=list(current.groups),
        display_name=current.display_name,
    ))


def get_user_permissions(gateway: ClusterGateway, username: str) -> ApiResponse[UserPermissions]:
    """Summarize what a user's roles allow."""
    return ApiResponse.ok(UserPermissions.from_user(gateway.get_user(username)))


def available_roles() -> ApiResponse[dict]:
    """Role catalogue; no cluster call."""
    return ApiResponse.ok(role_taxonomy.describe_taxonomy())
