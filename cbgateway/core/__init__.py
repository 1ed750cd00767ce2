"""Core Business Logic Module

Resource translation and validation, independent of Flask.

Module Structure:
    - couchbase/          : Couchbase management API client and gateway
    - resource_service.py : Resource handlers returning ApiResponse envelopes
    - roles.py            : RBAC role taxonomy and predicates
    - validators.py       : Request validation (returns messages, never raises)
    - models.py           : Domain records and the response envelope

Import explicitly when needed:
    from cbgateway.core import resource_service
    from cbgateway.core.couchbase import ClusterGateway, ClusterSettings
"""
