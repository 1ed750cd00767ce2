"""Couchbase-specific exceptions for error handling."""


class CouchbaseError(Exception):
    """Base exception for all cluster operations."""
    pass


class ClusterApiError(CouchbaseError):
    """Non-2xx response from the Couchbase management API.

    Attributes:
        status_code: Upstream HTTP status code
        message: Upstream response body (or a fallback literal)
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str = ""):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"Couchbase API error: {message} (status: {status_code})")

    @property
    def is_already_exists(self) -> bool:
        """True when the cluster rejected a create because the resource exists."""
        return self.status_code in (400, 409) and "already exists" in (self.message or "").lower()


class ClusterTransportError(CouchbaseError):
    """Network failure, timeout or undecodable response talking to the cluster."""
    pass


class NotFoundError(CouchbaseError):
    """Requested resource does not exist on the cluster."""
    pass


class BucketNotFoundError(NotFoundError):
    pass


class ScopeNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    """User lookup failed - username does not exist."""
    pass
