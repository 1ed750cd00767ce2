"""Low-level HTTP client for the Couchbase management REST API.

Handles Basic authentication, the per-call timeout and error normalization.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union

import requests

from .exceptions import ClusterApiError, ClusterTransportError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
UNKNOWN_ERROR = "Unknown error"

FormData = Union[dict, Sequence[Tuple[str, str]]]


@dataclass(frozen=True)
class ClusterSettings:
    """Connection settings for one cluster, fixed at startup."""
    base_url: str = "http://localhost:8091"
    username: str = "Administrator"
    password: str = "password"
    timeout: float = REQUEST_TIMEOUT

    def __repr__(self) -> str:
        return (
            f"ClusterSettings(base_url={self.base_url!r}, username={self.username!r}, "
            f"password='***', timeout={self.timeout!r})"
        )


class CouchbaseClient:
    """HTTP client for the Couchbase management API.

    Features:
    - One reusable requests.Session carrying the Basic credentials
    - Fixed timeout on every call, never retried
    - Centralized error handling (ClusterApiError / ClusterTransportError)

    Usage:
        client = CouchbaseClient(ClusterSettings("http://cb:8091", "Administrator", "password"))
        resp = client.get("/pools/default/buckets")
    """

    def __init__(self, settings: ClusterSettings, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            settings: Cluster URL, credentials and timeout
            session: Pre-built session (tests inject a stub here)
        """
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.session.auth = (settings.username, settings.password)

    def get(self, path: str, params: Optional[dict] = None) -> requests.Response:
        """Execute GET request.

        Raises:
            ClusterApiError: On non-2xx response
            ClusterTransportError: On network failure or timeout
        """
        return self._request("GET", path, params=params)

    def post(self, path: str, data: Optional[FormData] = None) -> requests.Response:
        """Execute form-encoded POST request."""
        return self._request("POST", path, data=data)

    def put(self, path: str, data: Optional[FormData] = None) -> requests.Response:
        """Execute form-encoded PUT request."""
        return self._request("PUT", path, data=data)

    def delete(self, path: str) -> requests.Response:
        """Execute DELETE request."""
        return self._request("DELETE", path)

    def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """GET a path and decode its JSON body.

        Raises:
            ClusterTransportError: If the body is not valid JSON
        """
        resp = self.get(path, params=params)
        try:
            return resp.json()
        except ValueError as exc:
            raise ClusterTransportError(f"Invalid JSON from {path}: {exc}") from exc

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("Couchbase %s %s", method, path)
        try:
            resp = self.session.request(method, url, timeout=self.settings.timeout, **kwargs)
        except requests.Timeout as exc:
            raise ClusterTransportError(
                f"Timed out after {self.settings.timeout}s calling {method} {path}"
            ) from exc
        except requests.RequestException as exc:
            raise ClusterTransportError(f"HTTP client error calling {method} {path}: {exc}") from exc
        self._handle_error(resp, path)
        return resp

    def _handle_error(self, resp: requests.Response, path: str) -> None:
        """Raise ClusterApiError for any non-2xx response.

        The upstream body becomes the error message; an unreadable body falls
        back to "Unknown error".
        """
        if 200 <= resp.status_code < 300:
            return
        try:
            message = resp.text
        except Exception:
            message = UNKNOWN_ERROR
        if not isinstance(message, str):
            message = UNKNOWN_ERROR
        logger.warning("Couchbase API error on %s: status=%s body=%s", path, resp.status_code, message)
        raise ClusterApiError(resp.status_code, message, path)
