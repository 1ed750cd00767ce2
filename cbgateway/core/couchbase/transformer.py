"""Couchbase REST ↔ domain record transformations.

Role wire format (as accepted by PUT /settings/rbac/users/local/{user}):

    admin                                global role
    data_reader[travel]                  bucket role
    data_reader[travel:inventory]        scope role
    data_reader[travel:inventory:hotel]  collection role

Several specs are joined with commas into a single ``roles`` form field.

Cluster responses are decoded defensively: missing or mistyped fields fall
back to empty/zero values instead of failing the whole request.

Usage:
    ClusterTransformer.encode_roles([Role("data_reader", "travel")])
    # 'data_reader[travel]'

    ClusterTransformer.decode_role("data_reader[travel]")
    # Role(role_id='data_reader', bucket='travel', scope=None, collection=None)
"""
from __future__ import annotations
import re
from typing import Any, Iterable, Optional

from cbgateway.core.models import Bucket, Collection, Role, Scope, User

BYTES_PER_MB = 1024 * 1024
UNKNOWN_ROLE = "unknown"

ROLE_SPEC_PATTERN = re.compile(r"^(?P<role>[^\[\]]+)\[(?P<target>[^\[\]]*)\]$")


def _str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _uint(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        return 0
    return int(value)


def _opt_uint(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def _opt_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


class ClusterTransformer:
    """Stateless encoders/decoders between domain records and cluster JSON/form data."""

    # ── Roles ────────────────────────────────────────────────────────────────

    @staticmethod
    def encode_role(role: Role) -> str:
        """Encode one role in the compact ``role[bucket:scope:collection]`` form.

        Specificity stops at the first missing level, so a collection without
        a scope is never emitted.
        """
        if role.bucket is None:
            return role.role_id
        target = role.bucket
        if role.scope is not None:
            target += f":{role.scope}"
            if role.collection is not None:
                target += f":{role.collection}"
        return f"{role.role_id}[{target}]"

    @staticmethod
    def encode_roles(roles: Iterable[Role]) -> str:
        """Join encoded roles into the single comma-separated field value."""
        return ",".join(ClusterTransformer.encode_role(role) for role in roles)

    @staticmethod
    def parse_role_spec(spec: str) -> Role:
        """Decode a compact role spec back into a Role."""
        match = ROLE_SPEC_PATTERN.match(spec.strip())
        if not match:
            return Role(role_id=spec.strip())
        parts = match.group("target").split(":")
        bucket = parts[0] if len(parts) > 0 and parts[0] else None
        scope = parts[1] if len(parts) > 1 and parts[1] else None
        collection = parts[2] if len(parts) > 2 and parts[2] else None
        return Role(role_id=match.group("role"), bucket=bucket, scope=scope, collection=collection)

    @staticmethod
    def decode_role(raw: Any) -> Role:
        """Decode one role entry from a cluster user document.

        Variants:
            str   → compact spec (a bare name is a global role)
            dict  → {"role", "bucket_name", "scope_name", "collection_name"}
            other → fallback: best-effort name, never raises

        The fallback also covers objects without a "role" key: the "name" key
        is tried next and "unknown" is used when neither is a string.
        """
        if isinstance(raw, str):
            return ClusterTransformer.parse_role_spec(raw)
        if isinstance(raw, dict) and isinstance(raw.get("role"), str):
            return Role(
                role_id=raw["role"],
                bucket=_opt_str(raw.get("bucket_name")),
                scope=_opt_str(raw.get("scope_name")),
                collection=_opt_str(raw.get("collection_name")),
            )
        return ClusterTransformer._decode_role_fallback(raw)

    @staticmethod
    def _decode_role_fallback(raw: Any) -> Role:
        source = _dict(raw)
        name = _opt_str(source.get("role")) or _opt_str(source.get("name")) or UNKNOWN_ROLE
        return Role(
            role_id=name,
            bucket=_opt_str(source.get("bucket_name")),
            scope=_opt_str(source.get("scope_name")),
            collection=_opt_str(source.get("collection_name")),
        )

    # ── Users ────────────────────────────────────────────────────────────────

    @staticmethod
    def user_from_cluster(raw: Any) -> User:
        """Convert a /settings/rbac/users entry to a User (no password)."""
        source = _dict(raw)
        groups = []
        for group in _list(source.get("groups")):
            group_name = _str(group)
            if group_name not in groups:
                groups.append(group_name)
        return User(
            username=_str(source.get("id")),
            roles=[ClusterTransformer.decode_role(role) for role in _list(source.get("roles"))],
            groups=groups,
            display_name=_opt_str(source.get("name")),
        )

    # ── Buckets ──────────────────────────────────────────────────────────────

    @staticmethod
    def bucket_from_cluster(raw: Any) -> Bucket:
        """Convert a /pools/default/buckets entry to a Bucket.

        quota.ram is reported by the cluster in bytes. Bucket status is taken
        from the top-level "status" when present, otherwise from the first
        node hosting the bucket.
        """
        source = _dict(raw)
        status = _str(source.get("status"))
        if not status:
            nodes = _list(source.get("nodes"))
            if nodes:
                status = _str(_dict(nodes[0]).get("status"))
        return Bucket(
            name=_str(source.get("name")),
            ram_quota_mb=_uint(_dict(source.get("quota")).get("ram")) // BYTES_PER_MB,
            replica_number=_uint(source.get("replicaNumber")),
            eviction_policy=_str(source.get("evictionPolicy")),
            compression_mode=_str(source.get("compressionMode")),
            conflict_resolution_type=_str(source.get("conflictResolutionType")),
            status=status,
        )

    # ── Scopes / collections ─────────────────────────────────────────────────

    @staticmethod
    def scopes_from_cluster(raw: Any) -> list[Scope]:
        """Convert a /pools/default/buckets/{b}/scopes manifest to Scopes."""
        scopes = []
        for scope in _list(_dict(raw).get("scopes")):
            scope = _dict(scope)
            scope_name = _str(scope.get("name"))
            collections = [
                Collection(
                    name=_str(_dict(collection).get("name")),
                    scope=scope_name,
                    max_ttl=_opt_uint(_dict(collection).get("maxTTL")),
                    history=_opt_bool(_dict(collection).get("history")),
                )
                for collection in _list(scope.get("collections"))
            ]
            scopes.append(Scope(name=scope_name, collections=collections))
        return scopes
