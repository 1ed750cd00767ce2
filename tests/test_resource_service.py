"""
Unit tests for cbgateway/core/resource_service.py

Handlers run against a real ClusterGateway wired to a fake session, so the
assertions cover both the envelope and the cluster calls that were (or were
not) made.
"""
import pytest
import requests

from cbgateway.core import resource_service
from cbgateway.core.couchbase import ClusterApiError, ClusterTransportError, UserNotFoundError
from cbgateway.core.models import (
    CreateBucketRequest,
    CreateCollectionRequest,
    CreateScopeRequest,
    CreateUserRequest,
    Role,
)

from conftest import FakeResponse, bucket_json, manifest_json, user_json

BUCKETS = "/pools/default/buckets"
SCOPES = "/pools/default/buckets/travel/scopes"
ALICE = "/settings/rbac/users/local/alice"


@pytest.fixture
def with_travel(fake_session):
    fake_session.add("GET", BUCKETS, FakeResponse(200, [bucket_json("travel")]))
    return fake_session


# ============================================================================
# Buckets
# ============================================================================

def test_create_bucket_applies_defaults(gateway, fake_session):
    fake_session.add("GET", BUCKETS, FakeResponse(200, []))
    fake_session.add("POST", BUCKETS, FakeResponse(202, text=""))

    result = resource_service.create_bucket(gateway, CreateBucketRequest(bucket_name="cache1"))

    assert result.success is True
    bucket = result.data
    assert (bucket.name, bucket.ram_quota_mb, bucket.replica_number) == ("cache1", 100, 1)
    assert bucket.eviction_policy == "valueOnly"
    assert bucket.compression_mode == "passive"
    assert bucket.conflict_resolution_type == "seqno"
    assert bucket.status == "healthy"


def test_create_bucket_duplicate_skips_create(gateway, with_travel):
    result = resource_service.create_bucket(gateway, CreateBucketRequest(bucket_name="travel"))
    assert result.success is False
    assert result.message == "Bucket 'travel' already exists"
    assert with_travel.calls_to("POST", BUCKETS) == []


def test_create_bucket_race_reported_as_duplicate(gateway, fake_session):
    fake_session.add("GET", BUCKETS, FakeResponse(200, []))
    fake_session.add("POST", BUCKETS, FakeResponse(400, text='{"errors":{"name":"Bucket with given name already exists"}}'))
    result = resource_service.create_bucket(gateway, CreateBucketRequest(bucket_name="travel"))
    assert result.success is False
    assert result.message == "Bucket 'travel' already exists"


def test_create_bucket_other_cluster_errors_propagate(gateway, fake_session):
    fake_session.add("GET", BUCKETS, FakeResponse(200, []))
    fake_session.add("POST", BUCKETS, FakeResponse(400, text='{"errors":{"ramQuota":"RAM quota cannot be less than 100 MiB"}}'))
    with pytest.raises(ClusterApiError):
        resource_service.create_bucket(gateway, CreateBucketRequest(bucket_name="tiny", ram_quota_mb=10))


def test_create_bucket_empty_name(gateway, fake_session):
    result = resource_service.create_bucket(gateway, CreateBucketRequest(bucket_name=""))
    assert result.message == "Bucket name cannot be empty"
    assert fake_session.calls == []


def test_list_buckets(gateway, with_travel):
    result = resource_service.list_buckets(gateway)
    assert [b.name for b in result.data] == ["travel"]


def test_list_buckets_transport_failure(gateway, fake_session):
    fake_session.add("GET", BUCKETS, requests.ConnectionError("refused"))
    with pytest.raises(ClusterTransportError):
        resource_service.list_buckets(gateway)


# ============================================================================
# Scopes
# ============================================================================

def test_create_scope(gateway, with_travel):
    with_travel.add("GET", SCOPES, FakeResponse(200, manifest_json(("_default", ["_default"]))))
    with_travel.add("POST", SCOPES, FakeResponse(200, {"uid": "2"}))

    result = resource_service.create_scope(gateway, "travel", CreateScopeRequest("inventory"))

    assert result.success is True
    assert result.data.name == "inventory"
    assert result.data.collections == []


def test_create_scope_without_bucket(gateway, fake_session):
    fake_session.add("GET", BUCKETS, FakeResponse(200, []))
    result = resource_service.create_scope(gateway, "nope", CreateScopeRequest("inventory"))
    assert result.to_dict() == {"success": False, "message": "Bucket 'nope' not found"}
    assert fake_session.calls_to("POST", "/pools/default/buckets/nope/scopes") == []


def test_create_scope_duplicate(gateway, with_travel):
    with_travel.add("GET", SCOPES, FakeResponse(200, manifest_json(("inventory", []))))
    result = resource_service.create_scope(gateway, "travel", CreateScopeRequest("inventory"))
    assert result.message == "Scope 'inventory' already exists in bucket 'travel'"


def test_list_scopes_missing_bucket(gateway, fake_session):
    fake_session.add("GET", BUCKETS, FakeResponse(200, []))
    assert resource_service.list_scopes(gateway, "nope").message == "Bucket 'nope' not found"


# ============================================================================
# Collections
# ============================================================================

def test_create_collection(gateway, with_travel):
    with_travel.add("GET", SCOPES, FakeResponse(200, manifest_json(("inventory", ["hotel"]))))
    with_travel.add("POST", f"{SCOPES}/inventory/collections", FakeResponse(200, {"uid": "4"}))

    request = CreateCollectionRequest("air", max_ttl=60)
    result = resource_service.create_collection(gateway, "travel", "inventory", request)

    assert result.success is True
    assert result.data.to_dict() == {"name": "air", "max_ttl": 60, "history": None, "scope": "inventory"}


def test_create_collection_missing_bucket(gateway, fake_session):
    fake_session.add("GET", BUCKETS, FakeResponse(200, [bucket_json("other")]))
    result = resource_service.create_collection(gateway, "X", "inventory", CreateCollectionRequest("air"))
    assert result.to_dict() == {"success": False, "message": "Bucket 'X' not found"}
    assert [c["method"] for c in fake_session.calls] == ["GET"]


def test_create_collection_missing_scope(gateway, with_travel):
    with_travel.add("GET", SCOPES, FakeResponse(200, manifest_json(("_default", []))))
    result = resource_service.create_collection(gateway, "travel", "inventory", CreateCollectionRequest("air"))
    assert result.message == "Scope 'inventory' not found in bucket 'travel'"
    assert with_travel.calls_to("POST", f"{SCOPES}/inventory/collections") == []


def test_create_collection_duplicate(gateway, with_travel):
    with_travel.add("GET", SCOPES, FakeResponse(200, manifest_json(("inventory", ["air"]))))
    result = resource_service.create_collection(gateway, "travel", "inventory", CreateCollectionRequest("air"))
    assert result.message == "Collection 'air' already exists in scope 'inventory' of bucket 'travel'"


def test_list_collections_missing_scope(gateway, with_travel):
    with_travel.add("GET", SCOPES, FakeResponse(200, manifest_json(("_default", []))))
    result = resource_service.list_collections(gateway, "travel", "inventory")
    assert result.message == "Scope 'inventory' not found in bucket 'travel'"


# ============================================================================
# Users
# ============================================================================

def make_user_request(**overrides):
    base = dict(
        username="alice",
        password="longenough1",
        roles=[Role("data_reader", "travel")],
        groups=["ops", "ops"],
    )
    base.update(overrides)
    return CreateUserRequest(**base)


def test_create_user_short_username_makes_no_call(gateway, fake_session):
    request = make_user_request(username="ab", roles=[Role("admin")])
    result = resource_service.create_user(gateway, request)
    assert result.to_dict() == {"success": False, "message": "Username must be at least 3 characters long"}
    assert fake_session.calls == []


def test_create_user(gateway, fake_session):
    fake_session.add("PUT", ALICE, FakeResponse(200, text=""))

    result = resource_service.create_user(gateway, make_user_request())

    assert result.success is True
    assert result.data.to_dict() == {
        "username": "alice",
        "roles": [{"role": "data_reader", "bucket": "travel", "scope": None, "collection": None}],
        "groups": ["ops"],
    }
    assert "longenough1" not in str(result.to_dict())
    assert dict(fake_session.calls_to("PUT", ALICE)[0]["data"])["groups"] == "ops"


def test_create_user_duplicate(gateway, fake_session):
    fake_session.add("GET", ALICE, FakeResponse(200, user_json("alice")))
    result = resource_service.create_user(gateway, make_user_request())
    assert result.message == "User 'alice' already exists"
    assert fake_session.calls_to("PUT", ALICE) == []


def test_create_user_existence_check_error_propagates(gateway, fake_session):
    fake_session.add("GET", ALICE, FakeResponse(401, text="Unauthorized"))
    with pytest.raises(ClusterApiError):
        resource_service.create_user(gateway, make_user_request())
    assert fake_session.calls_to("PUT", ALICE) == []


def test_get_user_not_found_propagates(gateway):
    with pytest.raises(UserNotFoundError):
        resource_service.get_user(gateway, "ghost")


def test_delete_user(gateway, fake_session):
    fake_session.add("DELETE", ALICE, FakeResponse(200, text=""))
    result = resource_service.delete_user(gateway, "alice")
    assert result.to_dict() == {"success": True, "message": "User 'alice' deleted"}


def test_update_user_roles_keeps_groups(gateway, fake_session):
    fake_session.add("GET", ALICE, FakeResponse(200, user_json("alice", roles=["admin"], groups=["ops"])))
    fake_session.add("PUT", ALICE, FakeResponse(200, text=""))

    result = resource_service.update_user_roles(gateway, "alice", [Role("data_writer", "travel")])

    assert result.success is True
    assert result.data.roles == [Role("data_writer", "travel")]
    data = dict(fake_session.calls_to("PUT", ALICE)[0]["data"])
    assert data == {"name": "alice", "roles": "data_writer[travel]", "groups": "ops"}


def test_update_user_roles_keeps_full_name_from_create(gateway, fake_session):
    fake_session.add(
        "GET",
        ALICE,
        FakeResponse(404, text="User was not found."),
        FakeResponse(200, user_json("alice", roles=["data_reader[travel]"], groups=["ops"], name="Alice Smith")),
    )
    fake_session.add("PUT", ALICE, FakeResponse(200, text=""))

    created = resource_service.create_user(gateway, make_user_request(display_name="Alice Smith"))
    updated = resource_service.update_user_roles(gateway, "alice", [Role("data_writer", "travel")])

    assert created.success is True
    assert updated.success is True
    assert updated.data.display_name == "Alice Smith"
    create_put, update_put = fake_session.calls_to("PUT", ALICE)
    assert dict(create_put["data"])["name"] == "Alice Smith"
    assert dict(update_put["data"])["name"] == "Alice Smith"


def test_update_user_roles_invalid(gateway, fake_session):
    result = resource_service.update_user_roles(gateway, "alice", [Role("data_writer")])
    assert result.message == "Data access role 'data_writer' requires a bucket to be specified"
    assert fake_session.calls == []


def test_update_user_roles_unknown_user(gateway):
    with pytest.raises(UserNotFoundError):
        resource_service.update_user_roles(gateway, "ghost", [Role("admin")])


def test_get_user_permissions(gateway, fake_session):
    fake_session.add("GET", ALICE, FakeResponse(200, user_json("alice", roles=["bucket_admin[travel]"])))
    result = resource_service.get_user_permissions(gateway, "alice")
    assert result.data.can_manage_buckets is True
    assert result.data.bucket_permissions == ["travel"]


def test_available_roles_needs_no_cluster(fake_session):
    result = resource_service.available_roles()
    assert "admin" in result.data["all_roles"]
    assert fake_session.calls == []
