"""Couchbase Admin Gateway Flask Application Package.

To use the Flask app:
    from cbgateway.flask_app import create_app

To use the cluster gateway directly:
    from cbgateway.core.couchbase import ClusterGateway, ClusterSettings

To use the resource handlers:
    from cbgateway.core import resource_service
"""
# Note: We don't import flask_app by default so the core package stays usable
# from scripts that only need cbgateway.core.couchbase

__version__ = "0.1.0"
