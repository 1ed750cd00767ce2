"""Couchbase management REST API client library.

Architecture:
- client.py: HTTP client with Basic auth, timeout and error normalization
- transformer.py: role wire encoding and tolerant response decoding
- buckets.py: bucket create/list
- scopes.py: scope and collection create/list
- users.py: RBAC user lifecycle (create, update, get, list, delete)
- gateway.py: ClusterGateway facade used by the resource handlers
- exceptions.py: typed exceptions for error handling

Usage:
    from cbgateway.core.couchbase import ClusterGateway, ClusterSettings

    gateway = ClusterGateway(ClusterSettings("http://couchbase:8091", "Administrator", "password"))
    for bucket in gateway.list_buckets():
        print(bucket.name)
"""
from .client import (
    ClusterSettings,
    CouchbaseClient,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    CouchbaseError,
    ClusterApiError,
    ClusterTransportError,
    NotFoundError,
    BucketNotFoundError,
    ScopeNotFoundError,
    UserNotFoundError,
)
from .transformer import ClusterTransformer
from .buckets import BucketService
from .scopes import ScopeService
from .users import UserService
from .gateway import ClusterGateway

__all__ = [
    # Client
    "ClusterSettings",
    "CouchbaseClient",
    "REQUEST_TIMEOUT",

    # Exceptions
    "CouchbaseError",
    "ClusterApiError",
    "ClusterTransportError",
    "NotFoundError",
    "BucketNotFoundError",
    "ScopeNotFoundError",
    "UserNotFoundError",

    # Services
    "ClusterTransformer",
    "BucketService",
    "ScopeService",
    "UserService",
    "ClusterGateway",
]
