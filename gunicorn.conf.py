"""Gunicorn configuration for the Couchbase admin gateway.

Run with:
    gunicorn -c gunicorn.conf.py "cbgateway.flask_app:create_app()"

Concurrency comes from worker processes and threads. Each worker builds its
own ClusterGateway (one requests.Session) in create_app().

Secret Loading (post_fork hook):
    /run/secrets/couchbase_password and /run/secrets/auth_password are read by
    cbgateway.config.settings; the hook only reports what the worker will see.
"""
import os
from pathlib import Path

bind = f"{os.environ.get('HOST', '0.0.0.0')}:{os.environ.get('PORT', '8080')}"
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
# Must exceed the per-call cluster timeout so workers are not killed mid-request
timeout = int(os.environ.get("COUCHBASE_TIMEOUT_SECONDS", "30")) + 30
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    secrets_dir = Path("/run/secrets")
    found = [
        name for name in ("couchbase_password", "auth_password")
        if (secrets_dir / name).is_file()
    ]
    if found:
        worker.log.info(f"Using Docker secrets from /run/secrets: {', '.join(found)}")
    else:
        worker.log.info("No Docker secrets mounted; credentials come from the environment")

    if os.environ.get("AUTH_ENABLED", "true").lower() in ("false", "0", "no", "off"):
        worker.log.warning("AUTH_ENABLED=false: gateway endpoints are unauthenticated")
