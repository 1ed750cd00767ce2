"""Couchbase RBAC user management operations."""
from __future__ import annotations
import logging

from requests.utils import quote

from cbgateway.core.models import User, UserConfig

from .client import CouchbaseClient
from .exceptions import ClusterApiError, UserNotFoundError
from .transformer import ClusterTransformer

logger = logging.getLogger(__name__)

USERS_PATH = "/settings/rbac/users"


def _user_path(username: str) -> str:
    return f"{USERS_PATH}/local/{quote(username, safe='')}"


class UserService:
    """Service for managing local RBAC users."""

    def __init__(self, client: CouchbaseClient):
        self.client = client

    def create_user(self, config: UserConfig) -> None:
        """Create a local user with its password and roles."""
        self._upsert(config)
        logger.info("User '%s' created with roles %s", config.username, ClusterTransformer.encode_roles(config.roles))

    def update_user(self, config: UserConfig) -> None:
        """Replace a user's roles (and groups) in place.

        When config.password is None the field is omitted and the cluster keeps
        the current password.

        Raises:
            UserNotFoundError: If the cluster answers 404
        """
        try:
            self._upsert(config)
        except ClusterApiError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{config.username}' not found") from exc
            raise
        logger.info("User '%s' updated with roles %s", config.username, ClusterTransformer.encode_roles(config.roles))

    def list_users(self) -> list[User]:
        payload = self.client.get_json(USERS_PATH)
        if not isinstance(payload, list):
            return []
        return [ClusterTransformer.user_from_cluster(item) for item in payload]

    def get_user(self, username: str) -> User:
        """Return one user.

        Raises:
            UserNotFoundError: If the cluster answers 404
        """
        try:
            payload = self.client.get_json(_user_path(username))
        except ClusterApiError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{username}' not found") from exc
            raise
        return ClusterTransformer.user_from_cluster(payload)

    def delete_user(self, username: str) -> None:
        """Delete a local user.

        Raises:
            UserNotFoundError: If the cluster answers 404
        """
        try:
            self.client.delete(_user_path(username))
        except ClusterApiError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{username}' not found") from exc
            raise
        logger.info("User '%s' deleted", username)

    def _upsert(self, config: UserConfig) -> None:
        # create and update share one encoding: a single comma-joined roles field
        params = [("name", config.display_name or config.username)]
        if config.password is not None:
            params.append(("password", config.password))
        params.append(("roles", ClusterTransformer.encode_roles(config.roles)))
        if config.groups:
            params.append(("groups", ",".join(config.groups)))
        self.client.put(_user_path(config.username), data=params)
