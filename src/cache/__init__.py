"""Redis caching layer.

This package provides:
- Connection registry with role-based connections (ConnectionRegistry)
- Reconnection backoff (ReconnectionPolicy)
- Keyed operations (CacheManager)
- Namespaced caches (NamespacedCache)
"""

from src.cache.connection import Connection, ConnectionRegistry, ConnectionRole
from src.cache.exceptions import CacheConnectionError, CacheError, CacheOperationError
from src.cache.keys import NAMESPACE_TAGS, CacheNamespace, namespaced_key
from src.cache.manager import CacheManager, decode_value, encode_value
from src.cache.namespaced import NamespacedCache, build_caches
from src.cache.retry import ReconnectionPolicy

__all__ = [
    # Connection
    "Connection",
    "ConnectionRegistry",
    "ConnectionRole",
    "ReconnectionPolicy",
    # Errors
    "CacheError",
    "CacheConnectionError",
    "CacheOperationError",
    # Keys
    "CacheNamespace",
    "NAMESPACE_TAGS",
    "namespaced_key",
    # Operations
    "CacheManager",
    "encode_value",
    "decode_value",
    # Named caches
    "NamespacedCache",
    "build_caches",
]
