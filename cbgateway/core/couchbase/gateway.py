"""Single entry point for every call the gateway makes to the cluster."""
from __future__ import annotations
from typing import Optional

import requests

from cbgateway.core.models import Bucket, BucketConfig, Collection, Scope, User, UserConfig

from .buckets import BucketService
from .client import ClusterSettings, CouchbaseClient
from .scopes import ScopeService
from .users import UserService


class ClusterGateway:
    """Facade over the bucket, scope and user services sharing one client.

    Usage:
        gateway = ClusterGateway(ClusterSettings("http://cb:8091", "Administrator", "password"))
        buckets = gateway.list_buckets()
    """

    def __init__(self, settings: ClusterSettings, session: Optional[requests.Session] = None):
        self.client = CouchbaseClient(settings, session=session)
        self.buckets = BucketService(self.client)
        self.scopes = ScopeService(self.client)
        self.users = UserService(self.client)

    # Buckets
    def create_bucket(self, config: BucketConfig) -> None:
        self.buckets.create_bucket(config)

    def list_buckets(self) -> list[Bucket]:
        return self.buckets.list_buckets()

    def bucket_exists(self, name: str) -> bool:
        return self.buckets.bucket_exists(name)

    # Scopes / collections
    def create_scope(self, bucket: str, name: str) -> None:
        self.scopes.create_scope(bucket, name)

    def list_scopes(self, bucket: str) -> list[Scope]:
        return self.scopes.list_scopes(bucket)

    def create_collection(
        self,
        bucket: str,
        scope: str,
        name: str,
        max_ttl: Optional[int] = None,
        history: Optional[bool] = None,
    ) -> None:
        self.scopes.create_collection(bucket, scope, name, max_ttl=max_ttl, history=history)

    def list_collections(self, bucket: str, scope: str) -> list[Collection]:
        return self.scopes.list_collections(bucket, scope)

    # Users
    def create_user(self, config: UserConfig) -> None:
        self.users.create_user(config)

    def update_user(self, config: UserConfig) -> None:
        self.users.update_user(config)

    def list_users(self) -> list[User]:
        return self.users.list_users()

    def get_user(self, username: str) -> User:
        return self.users.get_user(username)

    def delete_user(self, username: str) -> None:
        self.users.delete_user(username)
