"""Bucket, scope and collection endpoints."""
from __future__ import annotations

from flask import Blueprint

from cbgateway.api.decorators import require_basic_auth
from cbgateway.api.helpers import envelope, get_gateway, json_body
from cbgateway.core import resource_service
from cbgateway.core.models import CreateBucketRequest, CreateCollectionRequest, CreateScopeRequest

bp = Blueprint("buckets", __name__)
bp.before_request(require_basic_auth)


@bp.route("/buckets", methods=["POST"])
def create_bucket():
    """Create a bucket; unspecified settings use the gateway defaults."""
    request_model = CreateBucketRequest.from_dict(json_body())
    return envelope(resource_service.create_bucket(get_gateway(), request_model))


@bp.route("/buckets", methods=["GET"])
def list_buckets():
    return envelope(resource_service.list_buckets(get_gateway()))


@bp.route("/buckets/<bucket>/scopes", methods=["POST"])
def create_scope(bucket: str):
    request_model = CreateScopeRequest.from_dict(json_body())
    return envelope(resource_service.create_scope(get_gateway(), bucket, request_model))


@bp.route("/buckets/<bucket>/scopes", methods=["GET"])
def list_scopes(bucket: str):
    """List scopes of a bucket, each with its collections."""
    return envelope(resource_service.list_scopes(get_gateway(), bucket))


@bp.route("/buckets/<bucket>/scopes/<scope>/collections", methods=["POST"])
def create_collection(bucket: str, scope: str):
    request_model = CreateCollectionRequest.from_dict(json_body())
    return envelope(resource_service.create_collection(get_gateway(), bucket, scope, request_model))


@bp.route("/buckets/<bucket>/scopes/<scope>/collections", methods=["GET"])
def list_collections(bucket: str, scope: str):
    return envelope(resource_service.list_collections(get_gateway(), bucket, scope))
