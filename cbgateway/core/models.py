"""Domain records shared by the handlers, the gateway and the HTTP layer.

Inbound JSON is decoded with the ``from_dict`` constructors, which only check
shape (object, required keys, JSON types). Semantic checks live in
``cbgateway.core.validators``.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Generic, Optional, TypeVar

from cbgateway.core import roles as role_taxonomy

T = TypeVar("T")

DEFAULT_RAM_QUOTA_MB = 100
DEFAULT_REPLICA_NUMBER = 1
DEFAULT_EVICTION_POLICY = "valueOnly"
DEFAULT_COMPRESSION_MODE = "passive"
DEFAULT_CONFLICT_RESOLUTION_TYPE = "seqno"
DEFAULT_BUCKET_STATUS = "healthy"


class RequestValidationError(ValueError):
    """Inbound payload has the wrong shape (HTTP 400)."""
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Payload helpers
# ─────────────────────────────────────────────────────────────────────────────

def _require_object(payload: Any, what: str) -> dict:
    if not isinstance(payload, dict):
        raise RequestValidationError(f"{what} must be a JSON object")
    return payload


def _get_str(payload: dict, key: str, required: bool = False) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        if required:
            raise RequestValidationError(f"Missing required field '{key}'")
        return None
    if not isinstance(value, str):
        raise RequestValidationError(f"Field '{key}' must be a string")
    return value


def _get_uint(payload: dict, key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise RequestValidationError(f"Field '{key}' must be a non-negative integer")
    return value


def _get_bool(payload: dict, key: str) -> Optional[bool]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise RequestValidationError(f"Field '{key}' must be a boolean")
    return value


def _get_str_list(payload: dict, key: str) -> Optional[list[str]]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise RequestValidationError(f"Field '{key}' must be a list of strings")
    return value


def _drop_none(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


# ─────────────────────────────────────────────────────────────────────────────
# RBAC
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Role:
    """RBAC role grant, optionally scoped to a bucket, scope or collection."""
    role_id: str
    bucket: Optional[str] = None
    scope: Optional[str] = None
    collection: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "Role":
        payload = _require_object(payload, "Role")
        role_id = _get_str(payload, "role")
        if role_id is None:
            role_id = _get_str(payload, "role_id", required=True)
        return cls(
            role_id=role_id,
            bucket=_get_str(payload, "bucket"),
            scope=_get_str(payload, "scope"),
            collection=_get_str(payload, "collection"),
        )

    def to_dict(self) -> dict:
        return {
            "role": self.role_id,
            "bucket": self.bucket,
            "scope": self.scope,
            "collection": self.collection,
        }

    @property
    def is_console_access(self) -> bool:
        return role_taxonomy.has_console_access(self.role_id)


def roles_from_list(payload: Any) -> list[Role]:
    """Decode a JSON array of role objects."""
    if not isinstance(payload, list):
        raise RequestValidationError("Roles must be a JSON array")
    return [Role.from_dict(item) for item in payload]


@dataclass
class User:
    """RBAC user as reported by the cluster. Never carries a password."""
    username: str
    roles: list[Role] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    # Full name kept by the cluster; not part of the JSON representation
    display_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "roles": [role.to_dict() for role in self.roles],
            "groups": list(self.groups),
        }


@dataclass
class CreateUserRequest:
    username: str
    password: str
    roles: list[Role]
    groups: Optional[list[str]] = None
    display_name: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "CreateUserRequest":
        payload = _require_object(payload, "Request body")
        raw_roles = payload.get("roles")
        if raw_roles is None:
            raise RequestValidationError("Missing required field 'roles'")
        return cls(
            username=_get_str(payload, "username", required=True),
            password=_get_str(payload, "password", required=True),
            roles=roles_from_list(raw_roles),
            groups=_get_str_list(payload, "groups"),
            display_name=_get_str(payload, "display_name"),
        )

    def __repr__(self) -> str:
        # Keep the password out of logs and tracebacks
        return (
            f"CreateUserRequest(username={self.username!r}, password='***', "
            f"roles={self.roles!r}, groups={self.groups!r})"
        )


@dataclass
class UserConfig:
    """Payload for the cluster's user upsert endpoint."""
    username: str
    roles: list[Role]
    password: Optional[str] = None
    groups: list[str] = field(default_factory=list)
    display_name: Optional[str] = None

    def __repr__(self) -> str:
        return f"UserConfig(username={self.username!r}, roles={self.roles!r}, groups={self.groups!r})"


@dataclass
class UserPermissions:
    username: str
    console_access: bool
    bucket_permissions: list[str]
    roles: list[Role]
    groups: list[str]
    can_read_data: bool
    can_write_data: bool
    can_run_queries: bool
    can_manage_buckets: bool
    can_administer_cluster: bool

    @classmethod
    def from_user(cls, user: User) -> "UserPermissions":
        role_ids = [role.role_id for role in user.roles]
        # Distinct buckets, first-seen order
        buckets = list(dict.fromkeys(role.bucket for role in user.roles if role.bucket))
        return cls(
            username=user.username,
            console_access=any(role.is_console_access for role in user.roles),
            bucket_permissions=buckets,
            roles=list(user.roles),
            groups=list(user.groups),
            can_read_data=role_taxonomy.DATA_READER in role_ids,
            can_write_data=role_taxonomy.DATA_WRITER in role_ids,
            can_run_queries=any(role_taxonomy.is_query_role(r) for r in role_ids),
            can_manage_buckets=role_taxonomy.BUCKET_ADMIN in role_ids,
            can_administer_cluster=any(
                r in (role_taxonomy.ADMIN, role_taxonomy.CLUSTER_ADMIN) for r in role_ids
            ),
        )

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "console_access": self.console_access,
            "bucket_permissions": list(self.bucket_permissions),
            "roles": [role.to_dict() for role in self.roles],
            "groups": list(self.groups),
            "permission_summary": {
                "can_access_console": self.console_access,
                "can_read_data": self.can_read_data,
                "can_write_data": self.can_write_data,
                "can_run_queries": self.can_run_queries,
                "can_manage_buckets": self.can_manage_buckets,
                "can_administer_cluster": self.can_administer_cluster,
            },
        }


# ─────────────────────────────────────────────────────────────────────────────
# Buckets / scopes / collections
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class BucketConfig:
    """Fully resolved bucket settings sent to the cluster."""
    name: str
    ram_quota_mb: int = DEFAULT_RAM_QUOTA_MB
    replica_number: int = DEFAULT_REPLICA_NUMBER
    eviction_policy: str = DEFAULT_EVICTION_POLICY
    compression_mode: str = DEFAULT_COMPRESSION_MODE
    conflict_resolution_type: str = DEFAULT_CONFLICT_RESOLUTION_TYPE


@dataclass
class CreateBucketRequest:
    bucket_name: str
    ram_quota_mb: Optional[int] = None
    replica_number: Optional[int] = None
    eviction_policy: Optional[str] = None
    compression_mode: Optional[str] = None
    conflict_resolution_type: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "CreateBucketRequest":
        payload = _require_object(payload, "Request body")
        return cls(
            bucket_name=_get_str(payload, "bucket_name", required=True),
            ram_quota_mb=_get_uint(payload, "ram_quota_mb"),
            replica_number=_get_uint(payload, "replica_number"),
            eviction_policy=_get_str(payload, "eviction_policy"),
            compression_mode=_get_str(payload, "compression_mode"),
            conflict_resolution_type=_get_str(payload, "conflict_resolution_type"),
        )

    def to_config(self) -> BucketConfig:
        """Resolve unspecified settings to their defaults."""
        return BucketConfig(
            name=self.bucket_name,
            ram_quota_mb=DEFAULT_RAM_QUOTA_MB if self.ram_quota_mb is None else self.ram_quota_mb,
            replica_number=DEFAULT_REPLICA_NUMBER if self.replica_number is None else self.replica_number,
            eviction_policy=self.eviction_policy or DEFAULT_EVICTION_POLICY,
            compression_mode=self.compression_mode or DEFAULT_COMPRESSION_MODE,
            conflict_resolution_type=self.conflict_resolution_type or DEFAULT_CONFLICT_RESOLUTION_TYPE,
        )


@dataclass
class Bucket:
    name: str
    ram_quota_mb: int
    replica_number: int
    eviction_policy: str
    compression_mode: str
    conflict_resolution_type: str
    status: str

    @classmethod
    def from_config(cls, config: BucketConfig, status: str = DEFAULT_BUCKET_STATUS) -> "Bucket":
        return cls(
            name=config.name,
            ram_quota_mb=config.ram_quota_mb,
            replica_number=config.replica_number,
            eviction_policy=config.eviction_policy,
            compression_mode=config.compression_mode,
            conflict_resolution_type=config.conflict_resolution_type,
            status=status,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Collection:
    name: str
    scope: str
    max_ttl: Optional[int] = None
    history: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "max_ttl": self.max_ttl,
            "history": self.history,
            "scope": self.scope,
        }


@dataclass
class Scope:
    name: str
    collections: list[Collection] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "collections": [collection.to_dict() for collection in self.collections],
        }


@dataclass
class CreateScopeRequest:
    scope_name: str

    @classmethod
    def from_dict(cls, payload: Any) -> "CreateScopeRequest":
        payload = _require_object(payload, "Request body")
        return cls(scope_name=_get_str(payload, "scope_name", required=True))


@dataclass
class CreateCollectionRequest:
    collection_name: str
    max_ttl: Optional[int] = None
    history: Optional[bool] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "CreateCollectionRequest":
        payload = _require_object(payload, "Request body")
        return cls(
            collection_name=_get_str(payload, "collection_name", required=True),
            max_ttl=_get_uint(payload, "max_ttl"),
            history=_get_bool(payload, "history"),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Response envelope
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ApiResponse(Generic[T]):
    """Uniform ``{success, data, message}`` envelope returned by every handler."""
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: Optional[str] = None) -> "ApiResponse[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def error(cls, message: str) -> "ApiResponse[T]":
        return cls(success=False, message=message)

    def to_dict(self) -> dict:
        """Serialize for JSON; absent fields are omitted."""
        return _drop_none({
            "success": self.success,
            "data": _serialize(self.data),
            "message": self.message,
        })


def _serialize(value: Any) -> Any:
    if value is None:
        return None
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value
