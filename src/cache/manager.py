"""Keyed cache operations against the backend.

This module provides the CacheManager class with get/set/delete/exists
primitives. Structured values are JSON-encoded on write and decoded on
read; strings and numbers are stored as they are, bytes as UTF-8 text.
"""

import json
import time
from typing import Any, Awaitable, Callable, Optional

import redis.asyncio as redis
import structlog

from src.cache.connection import ConnectionRegistry, ConnectionRole
from src.cache.exceptions import CacheOperationError
from src.utils.logger import log_cache_operation

logger = structlog.get_logger(__name__)

FLAT_TYPES = (str, int, float)


def encode_value(value: Any) -> Any:
    """
    Prepare a value for storage.

    Args:
        value: Value to store

    Returns:
        The value unchanged when flat, bytes decoded as UTF-8, otherwise
        its JSON encoding

    Raises:
        TypeError: If a structured value is not JSON-serializable
        UnicodeDecodeError: If bytes are not valid UTF-8

    Example:
        >>> encode_value({"name": "hype"})
        '{"name": "hype"}'
        >>> encode_value("hypeMan")
        'hypeMan'
    """
    # Clients decode every reply as UTF-8, so bytes must be valid text
    if isinstance(value, bytes):
        return value.decode("utf-8")
    # bool is an int subclass but redis rejects it
    if isinstance(value, FLAT_TYPES) and not isinstance(value, bool):
        return value
    return json.dumps(value)


def decode_value(raw: Optional[str]) -> Any:
    """
    Decode a stored value, falling back to the raw string.

    Example:
        >>> decode_value('{"name": "hype"}')
        {'name': 'hype'}
        >>> decode_value("hypeMan")
        'hypeMan'
    """
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


class CacheManager:
    """
    Main cache operations manager.

    Each operation runs inside a scoped connection from the registry, so
    the connection is released whether the operation succeeds or fails.
    Backend failures are logged and raised as CacheOperationError;
    connection failures surface as CacheConnectionError.

    Attributes:
        registry: Connection registry supplying backend connections
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """
        Store a value, optionally expiring after ttl_seconds.

        Args:
            key: Backend key
            value: Value to store (structured values are JSON-encoded)
            ttl_seconds: Time to live in seconds; falsy means no expiration

        Returns:
            True once the value is stored

        Example:
            >>> await manager.set("taxonomy-hype", {"name": "hypeMan"}, ttl_seconds=60)
            True
        """
        try:
            body = encode_value(value)
        except (TypeError, ValueError) as e:
            logger.error(
                "cache_set_serialization_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise CacheOperationError("set", key, message=f"Value for key '{key}' is not serializable") from e

        started = time.perf_counter()
        try:
            async with self.registry.connection(ConnectionRole.PRIMARY) as conn:
                if ttl_seconds:
                    await conn.client.set(key, body, ex=ttl_seconds)
                else:
                    await conn.client.set(key, body)
        except redis.RedisError as e:
            self._log_failure("set", key, started, e)
            raise CacheOperationError("set", key) from e

        log_cache_operation("set", key, _elapsed_ms(started), ttl=ttl_seconds)
        return True

    async def get(self, key: str, role: ConnectionRole | str = ConnectionRole.PRIMARY) -> Any:
        """
        Retrieve a value by key.

        Args:
            key: Backend key
            role: Connection role to read from (primary or reader)

        Returns:
            Decoded value, the raw string if it is not JSON, or None if absent
        """
        started = time.perf_counter()
        try:
            async with self.registry.connection(role) as conn:
                raw = await conn.client.get(key)
        except redis.RedisError as e:
            self._log_failure("get", key, started, e)
            raise CacheOperationError("get", key) from e
        except UnicodeDecodeError as e:
            # Written by another client as non-UTF-8 bytes
            self._log_failure("get", key, started, e)
            raise CacheOperationError("get", key, message=f"Value for key '{key}' is not valid UTF-8") from e

        log_cache_operation("get", key, _elapsed_ms(started), hit=raw is not None)
        return decode_value(raw)

    async def delete(self, key: str) -> bool:
        """
        Delete a value by key.

        Returns:
            True if a key was removed, False if it did not exist
        """
        started = time.perf_counter()
        try:
            async with self.registry.connection(ConnectionRole.PRIMARY) as conn:
                removed = await conn.client.delete(key)
        except redis.RedisError as e:
            self._log_failure("delete", key, started, e)
            raise CacheOperationError("delete", key) from e

        log_cache_operation("delete", key, _elapsed_ms(started), deleted=bool(removed))
        return bool(removed)

    async def exists(self, key: str, role: ConnectionRole | str = ConnectionRole.PRIMARY) -> bool:
        """Return True if the backend holds the key (without reading its value)."""
        started = time.perf_counter()
        try:
            async with self.registry.connection(role) as conn:
                count = await conn.client.exists(key)
        except redis.RedisError as e:
            self._log_failure("exists", key, started, e)
            raise CacheOperationError("exists", key) from e

        log_cache_operation("exists", key, _elapsed_ms(started), exists=bool(count))
        return bool(count)

    async def get_or_fetch(
        self,
        key: str,
        fetch_func: Callable[[], Awaitable[Any]],
        ttl_seconds: Optional[int] = None,
    ) -> Any:
        """
        Get from cache or fetch and cache (cache-aside pattern).

        Args:
            key: Backend key
            fetch_func: Async function producing the value on a miss
            ttl_seconds: Time to live for the fetched value

        Returns:
            Cached or freshly fetched value

        Example:
            >>> async def load_taxonomy():
            ...     return {"name": "hypeMan"}
            >>> await manager.get_or_fetch("taxonomy-hype", load_taxonomy, 300)
        """
        cached = await self.get(key)
        if cached is not None:
            logger.debug("cache_hit_get_or_fetch", key=key)
            return cached

        logger.info("cache_miss_fetching", key=key)

        try:
            data = await fetch_func()
        except Exception as e:
            logger.error(
                "fetch_function_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        if data is not None:
            await self.set(key, data, ttl_seconds)
        return data

    @staticmethod
    def _log_failure(operation: str, key: str, started: float, error: Exception) -> None:
        log_cache_operation(
            operation,
            key,
            _elapsed_ms(started),
            error=str(error),
            error_type=type(error).__name__,
        )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
