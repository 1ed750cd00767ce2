"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cbgateway.core.couchbase.client import ClusterSettings, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """Return /run/secrets/{secret_name} if mounted and non-empty, else $env_var, else None."""
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as exc:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, exc)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_bool(var_name: str, default: bool) -> bool:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable {var_name} must be a boolean, got {raw!r}")


def _env_int(var_name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"Environment variable {var_name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"Environment variable {var_name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class AppConfig:
    """Application configuration container."""
    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Couchbase cluster
    couchbase_host: str = "http://localhost:8091"
    couchbase_username: str = "Administrator"
    couchbase_password: str = "password"
    couchbase_timeout_seconds: int = REQUEST_TIMEOUT

    # Inbound Basic auth
    auth_enabled: bool = True
    auth_username: str = "admin"
    auth_password: str = "admin"

    @property
    def cluster(self) -> ClusterSettings:
        """Immutable connection settings handed to the ClusterGateway."""
        return ClusterSettings(
            base_url=self.couchbase_host,
            username=self.couchbase_username,
            password=self.couchbase_password,
            timeout=self.couchbase_timeout_seconds,
        )

    def __repr__(self) -> str:
        return (
            f"AppConfig(host={self.host!r}, port={self.port}, couchbase_host={self.couchbase_host!r}, "
            f"couchbase_username={self.couchbase_username!r}, auth_enabled={self.auth_enabled})"
        )


def load_settings(overrides: Optional[dict] = None) -> AppConfig:
    """Load application settings from environment and /run/secrets.

    Args:
        overrides: Field values that take precedence (used by tests)

    Raises:
        ValueError: If a numeric or boolean variable cannot be parsed
    """
    defaults = AppConfig()

    couchbase_password = _load_secret_from_file("couchbase_password", "COUCHBASE_PASSWORD")
    auth_password = _load_secret_from_file("auth_password", "AUTH_PASSWORD")

    values = dict(
        host=os.environ.get("HOST", defaults.host),
        port=_env_int("PORT", defaults.port, minimum=1),
        log_level=os.environ.get("LOG_LEVEL", defaults.log_level).strip().upper(),
        couchbase_host=os.environ.get("COUCHBASE_HOST", defaults.couchbase_host).rstrip("/"),
        couchbase_username=os.environ.get("COUCHBASE_USERNAME", defaults.couchbase_username),
        couchbase_password=couchbase_password or defaults.couchbase_password,
        couchbase_timeout_seconds=_env_int("COUCHBASE_TIMEOUT_SECONDS", defaults.couchbase_timeout_seconds, minimum=1),
        auth_enabled=_env_bool("AUTH_ENABLED", defaults.auth_enabled),
        auth_username=os.environ.get("AUTH_USERNAME", defaults.auth_username),
        auth_password=auth_password or defaults.auth_password,
    )
    if overrides:
        values.update(overrides)

    cfg = AppConfig(**values)
    logger.info(
        "Settings loaded: couchbase=%s user=%s timeout=%ss auth_enabled=%s",
        cfg.couchbase_host,
        cfg.couchbase_username,
        cfg.couchbase_timeout_seconds,
        cfg.auth_enabled,
    )
    if cfg.auth_enabled and cfg.auth_password == defaults.auth_password:
        logger.warning("Default gateway credentials in use. Set AUTH_PASSWORD before deploying.")
    return cfg
