"""Couchbase bucket management operations."""
from __future__ import annotations
import logging

from cbgateway.core.models import Bucket, BucketConfig

from .client import CouchbaseClient
from .transformer import ClusterTransformer

logger = logging.getLogger(__name__)

BUCKETS_PATH = "/pools/default/buckets"


class BucketService:
    """Service for managing Couchbase buckets."""

    def __init__(self, client: CouchbaseClient):
        self.client = client

    def create_bucket(self, config: BucketConfig) -> None:
        """Create a bucket with fully resolved settings.

        Raises:
            ClusterApiError: If the cluster rejects the request
        """
        params = [
            ("name", config.name),
            ("ramQuotaMB", str(config.ram_quota_mb)),
            ("replicaNumber", str(config.replica_number)),
            ("evictionPolicy", config.eviction_policy),
            ("compressionMode", config.compression_mode),
            ("conflictResolutionType", config.conflict_resolution_type),
        ]
        self.client.post(BUCKETS_PATH, data=params)
        logger.info("Bucket '%s' created (ram=%sMB, replicas=%s)", config.name, config.ram_quota_mb, config.replica_number)

    def list_buckets(self) -> list[Bucket]:
        """Return buckets in cluster order."""
        payload = self.client.get_json(BUCKETS_PATH)
        if not isinstance(payload, list):
            return []
        return [ClusterTransformer.bucket_from_cluster(item) for item in payload]

    def bucket_exists(self, name: str) -> bool:
        return any(bucket.name == name for bucket in self.list_buckets())
