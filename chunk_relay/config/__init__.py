"""Configuration module for application settings."""

from .settings import settings
from .storage import get_storage_client, get_bucket_name
from .redis import get_redis, close_redis
from .http_client import get_http_client, close_http_client

__all__ = [
    "settings",
    "get_storage_client",
    "get_bucket_name",
    "get_redis",
    "close_redis",
    "get_http_client",
    "close_http_client",
]
