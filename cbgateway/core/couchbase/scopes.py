"""Couchbase scope and collection management operations."""
from __future__ import annotations
import logging
from typing import Optional

from requests.utils import quote

from cbgateway.core.models import Collection, Scope

from .client import CouchbaseClient
from .exceptions import BucketNotFoundError, ClusterApiError, ScopeNotFoundError
from .transformer import ClusterTransformer

logger = logging.getLogger(__name__)


def _scopes_path(bucket: str) -> str:
    return f"/pools/default/buckets/{quote(bucket, safe='')}/scopes"


class ScopeService:
    """Service for managing scopes and the collections they contain."""

    def __init__(self, client: CouchbaseClient):
        self.client = client

    def create_scope(self, bucket: str, name: str) -> None:
        """Create a scope inside a bucket."""
        self.client.post(_scopes_path(bucket), data=[("name", name)])
        logger.info("Scope '%s' created in bucket '%s'", name, bucket)

    def list_scopes(self, bucket: str) -> list[Scope]:
        """Return the bucket's scopes with their collections embedded.

        Raises:
            BucketNotFoundError: If the cluster answers 404
        """
        try:
            manifest = self.client.get_json(_scopes_path(bucket))
        except ClusterApiError as exc:
            if exc.status_code == 404:
                raise BucketNotFoundError(f"Bucket '{bucket}' not found") from exc
            raise
        return ClusterTransformer.scopes_from_cluster(manifest)

    def create_collection(
        self,
        bucket: str,
        scope: str,
        name: str,
        max_ttl: Optional[int] = None,
        history: Optional[bool] = None,
    ) -> None:
        """Create a collection; maxTTL and history are sent only when given."""
        params = [("name", name)]
        if max_ttl is not None:
            params.append(("maxTTL", str(max_ttl)))
        if history is not None:
            params.append(("history", "true" if history else "false"))
        self.client.post(f"{_scopes_path(bucket)}/{quote(scope, safe='')}/collections", data=params)
        logger.info("Collection '%s' created in '%s.%s'", name, bucket, scope)

    def list_collections(self, bucket: str, scope: str) -> list[Collection]:
        """Return the collections of one scope, derived from list_scopes.

        Raises:
            ScopeNotFoundError: If the scope is not in the bucket
        """
        for candidate in self.list_scopes(bucket):
            if candidate.name == scope:
                return candidate.collections
        raise ScopeNotFoundError(f"Scope '{scope}' not found")
