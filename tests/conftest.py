"""Pytest shared fixtures for the gateway tests."""
import base64
import json
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from cbgateway.config.settings import AppConfig
from cbgateway.core.couchbase import ClusterGateway, ClusterSettings
from cbgateway.flask_app import create_app

CLUSTER_URL = "http://cb.test:8091"
GATEWAY_USER = "admin"
GATEWAY_PASSWORD = "gateway-pass"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_real_http(monkeypatch, request):
    """Prevent unit tests from reaching a real cluster.

    Integration tests are marked with @pytest.mark.integration and skip this
    fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests.Session, "request", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# Fake Couchbase management API
# ─────────────────────────────────────────────────────────────────────────────
class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Stand-in for requests.Session answering from a (method, path) table.

    Values in ``routes`` are a FakeResponse, an exception instance to raise,
    or a list of either (consumed in order; the last entry repeats).
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.auth = None

    def add(self, method: str, path: str, *responses):
        self.routes[(method.upper(), path)] = list(responses)
        return self

    def request(self, method, url, timeout=None, **kwargs):
        path = url[len(CLUSTER_URL):] if url.startswith(CLUSTER_URL) else url
        self.calls.append({"method": method, "path": path, "timeout": timeout, **kwargs})
        queue = self.routes.get((method.upper(), path))
        if not queue:
            return FakeResponse(404, text=f"Not found: {method} {path}")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def calls_to(self, method: str, path: str) -> list:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]


def bucket_json(name: str, ram_mb: int = 100, status: str = "healthy", **extra) -> dict:
    """Bucket entry shaped like GET /pools/default/buckets."""
    payload = {
        "name": name,
        "quota": {"ram": ram_mb * 1024 * 1024, "rawRAM": ram_mb * 1024 * 1024},
        "replicaNumber": 1,
        "evictionPolicy": "valueOnly",
        "compressionMode": "passive",
        "conflictResolutionType": "seqno",
        "nodes": [{"hostname": "cb.test:8091", "status": status}],
    }
    payload.update(extra)
    return payload


def manifest_json(*scopes) -> dict:
    """Scope manifest; each scope is (name, [collection names])."""
    return {
        "uid": "1",
        "scopes": [
            {"name": name, "uid": str(i), "collections": [{"name": c, "uid": "0", "maxTTL": 0} for c in cols]}
            for i, (name, cols) in enumerate(scopes)
        ],
    }


def user_json(username: str, roles=None, groups=None, name=None) -> dict:
    """User entry shaped like GET /settings/rbac/users/local/{u}."""
    return {
        "id": username,
        "domain": "local",
        "name": name if name is not None else username,
        "roles": roles if roles is not None else [],
        "groups": groups if groups is not None else [],
    }


@pytest.fixture()
def cluster_settings():
    return ClusterSettings(base_url=CLUSTER_URL, username="Administrator", password="cluster-pass", timeout=5)


@pytest.fixture()
def fake_session():
    return FakeSession()


@pytest.fixture()
def gateway(cluster_settings, fake_session):
    return ClusterGateway(cluster_settings, session=fake_session)


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    base = dict(
        couchbase_host=CLUSTER_URL,
        couchbase_username="Administrator",
        couchbase_password="cluster-pass",
        couchbase_timeout_seconds=5,
        auth_enabled=True,
        auth_username=GATEWAY_USER,
        auth_password=GATEWAY_PASSWORD,
    )
    base.update(overrides)
    return AppConfig(**base)


def basic_auth(username: str = GATEWAY_USER, password: str = GATEWAY_PASSWORD) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture()
def app(gateway):
    flask_app = create_app(make_config(), gateway=gateway)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def auth_headers():
    return basic_auth()
