"""Couchbase RBAC role taxonomy.

All role-name checks in the gateway go through this module. The sets are
static; the predicates are plain membership tests and never raise.
"""
from __future__ import annotations

# Data access roles (bucket required)
DATA_READER = "data_reader"
DATA_WRITER = "data_writer"
DATA_DCP_READER = "data_dcp_reader"
BUCKET_ADMIN = "bucket_admin"

# Administrative roles (console access)
ADMIN = "admin"
CLUSTER_ADMIN = "cluster_admin"
REPLICATION_ADMIN = "replication_admin"
VIEWS_ADMIN = "views_admin"
QUERY_MANAGE = "query_manage"

# Query roles
QUERY_SELECT = "query_select"
QUERY_INSERT = "query_insert"
QUERY_UPDATE = "query_update"
QUERY_DELETE = "query_delete"

CONSOLE_ACCESS_ROLES: tuple[str, ...] = (
    ADMIN,
    CLUSTER_ADMIN,
    REPLICATION_ADMIN,
    VIEWS_ADMIN,
    QUERY_MANAGE,
)

DATA_ACCESS_ROLES: tuple[str, ...] = (
    DATA_READER,
    DATA_WRITER,
    DATA_DCP_READER,
    BUCKET_ADMIN,
)

QUERY_ROLES: tuple[str, ...] = (
    QUERY_SELECT,
    QUERY_INSERT,
    QUERY_UPDATE,
    QUERY_DELETE,
    QUERY_MANAGE,
)

ALL_ROLES: tuple[str, ...] = (
    DATA_READER,
    DATA_WRITER,
    DATA_DCP_READER,
    BUCKET_ADMIN,
    ADMIN,
    CLUSTER_ADMIN,
    REPLICATION_ADMIN,
    VIEWS_ADMIN,
    QUERY_SELECT,
    QUERY_INSERT,
    QUERY_UPDATE,
    QUERY_DELETE,
    QUERY_MANAGE,
)

ROLE_DESCRIPTIONS: dict[str, str] = {
    ADMIN: "Full administrative access to Couchbase console and all resources",
    CLUSTER_ADMIN: "Cluster administration access",
    REPLICATION_ADMIN: "Replication management access",
    VIEWS_ADMIN: "Views management access",
    QUERY_MANAGE: "Query management access",
    DATA_READER: "Read access to data (requires bucket)",
    DATA_WRITER: "Write access to data (requires bucket)",
    DATA_DCP_READER: "DCP read access (requires bucket)",
    BUCKET_ADMIN: "Full access to specific bucket (requires bucket)",
    QUERY_SELECT: "SELECT query access",
    QUERY_INSERT: "INSERT query access",
    QUERY_UPDATE: "UPDATE query access",
    QUERY_DELETE: "DELETE query access",
}

_ALL = frozenset(ALL_ROLES)
_CONSOLE = frozenset(CONSOLE_ACCESS_ROLES)
_DATA = frozenset(DATA_ACCESS_ROLES)
_QUERY = frozenset(QUERY_ROLES)


def is_valid_role(role: str) -> bool:
    """Check if role belongs to the taxonomy."""
    return role in _ALL


def has_console_access(role: str) -> bool:
    """Check if role grants access to the web console."""
    return role in _CONSOLE


def is_data_access_role(role: str) -> bool:
    """Check if role is a data access role (bucket required)."""
    return role in _DATA


def is_query_role(role: str) -> bool:
    """Check if role grants query privileges."""
    return role in _QUERY


def describe_taxonomy() -> dict:
    """Return the role catalogue served by GET /roles."""
    return {
        "console_access_roles": list(CONSOLE_ACCESS_ROLES),
        "data_access_roles": list(DATA_ACCESS_ROLES),
        "query_roles": list(QUERY_ROLES),
        "all_roles": list(ALL_ROLES),
        "role_descriptions": dict(ROLE_DESCRIPTIONS),
    }
