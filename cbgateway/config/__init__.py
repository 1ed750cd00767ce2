"""Configuration module for the Couchbase admin gateway."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
