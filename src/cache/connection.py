"""Backend connection registry.

This module provides the ConnectionRegistry class, which lazily creates
one connection per role (primary, reader), reuses it while it is live,
retries failed connection attempts with the reconnection policy, and
tears connections down on request or at shutdown.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, Optional

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

import structlog

from src.cache.exceptions import CacheConnectionError
from src.cache.retry import ReconnectionPolicy
from src.config import Settings

logger = structlog.get_logger(__name__)

# Errors that mean "backend not reachable right now"; anything else
# reported before readiness is terminal.
TRANSIENT_ERRORS = (redis.ConnectionError, redis.TimeoutError)


def _is_transient(error: BaseException) -> bool:
    # AuthenticationError subclasses ConnectionError but retrying cannot fix it
    return isinstance(error, TRANSIENT_ERRORS) and not isinstance(
        error, redis.AuthenticationError
    )


class ConnectionRole(str, Enum):
    """Logical purpose of a connection."""

    PRIMARY = "primary"
    READER = "reader"


@dataclass
class Connection:
    """
    A live session to the backend.

    Attributes:
        role: Role this connection serves
        client: Underlying redis client
        is_connected: False once the connection was torn down or found unusable
        in_use: Number of callers currently holding the connection
    """

    role: ConnectionRole
    client: Any
    is_connected: bool = True
    in_use: int = 0


def default_client_factory(**kwargs: Any) -> redis.Redis:
    """Build a redis client that never retries on its own."""
    return redis.Redis(
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
        retry=Retry(NoBackoff(), 0),
        **kwargs,
    )


class ConnectionRegistry:
    """
    Holds at most one current connection per role.

    Construct one registry per process, pass it to whatever needs the
    backend, and call close() at shutdown.

    Attributes:
        settings: Backend host/port/credential settings
        policy: Backoff policy applied to failed connection attempts
        close_after_use: Tear a connection down once its last user releases it
    """

    def __init__(
        self,
        settings: Settings,
        policy: Optional[ReconnectionPolicy] = None,
        client_factory: Optional[Callable[..., Any]] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.policy = policy or ReconnectionPolicy.from_settings(settings)
        self.close_after_use = settings.redis_close_after_operation
        self._client_factory = client_factory or default_client_factory
        self._sleep = sleep
        self._connections: Dict[ConnectionRole, Connection] = {}
        self._locks: Dict[ConnectionRole, asyncio.Lock] = {
            role: asyncio.Lock() for role in ConnectionRole
        }

    def _address(self, role: ConnectionRole) -> tuple[str, int]:
        if role is ConnectionRole.READER:
            return self.settings.reader_host, self.settings.redis_port
        return self.settings.redis_host, self.settings.redis_port

    def is_connected(self, role: ConnectionRole | str = ConnectionRole.PRIMARY) -> bool:
        """Return True if a live connection is tracked for the role."""
        current = self._connections.get(ConnectionRole(role))
        return current is not None and current.is_connected

    async def acquire(self, role: ConnectionRole | str = ConnectionRole.PRIMARY) -> Connection:
        """
        Return the live connection for a role, creating it if needed.

        Every successful acquire must be paired with release(); prefer the
        connection() context manager which does that for you.

        Args:
            role: Connection role (primary or reader)

        Returns:
            Live connection for the role

        Raises:
            CacheConnectionError: If the backend could not be reached
        """
        role = ConnectionRole(role)

        async with self._locks[role]:
            current = self._connections.get(role)
            if current is None or not current.is_connected:
                current = await self._connect(role)
                self._connections[role] = current
            current.in_use += 1
            return current

    async def _connect(self, role: ConnectionRole) -> Connection:
        host, port = self._address(role)
        password = self.settings.redis_password
        attempt = 0
        started = time.monotonic()

        logger.info(
            "redis_client_creation",
            role=role.value,
            host=host,
            port=port,
            exec_env=self.settings.exec_env,
        )

        while True:
            client = self._client_factory(
                host=host,
                port=port,
                db=self.settings.redis_db,
                password=password.get_secret_value() if password else None,
            )
            try:
                # Ready once the backend answers
                await client.ping()
            except redis.RedisError as e:
                await self._close_client(client)
                attempt += 1
                elapsed_ms = int((time.monotonic() - started) * 1000)

                if not _is_transient(e) or self.policy.exhausted(attempt, elapsed_ms):
                    logger.error(
                        "redis_connection_failed",
                        role=role.value,
                        host=host,
                        port=port,
                        attempts=attempt,
                        total_retry_time_ms=elapsed_ms,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise CacheConnectionError(role.value, host, port, attempts=attempt) from e

                delay_ms = self.policy.next_delay(e, attempt, elapsed_ms)
                await self._sleep(delay_ms / 1000)
                continue

            logger.info("redis_client_ready", role=role.value, host=host, port=port)
            return Connection(role=role, client=client)

    async def release(self, connection: Connection, close: bool = False) -> None:
        """
        Give back a connection obtained from acquire().

        Args:
            connection: Connection to release
            close: Tear the connection down even if others still use it
        """
        connection.in_use = max(connection.in_use - 1, 0)

        if close or (self.close_after_use and connection.in_use == 0):
            await self._teardown(connection)

    @asynccontextmanager
    async def connection(
        self, role: ConnectionRole | str = ConnectionRole.PRIMARY
    ) -> AsyncIterator[Connection]:
        """
        Scoped acquisition: the connection is released on every exit path.

        A connection-level error inside the block marks the connection
        unusable so the next acquire() creates a fresh one.

        Example:
            >>> async with registry.connection("primary") as conn:
            ...     await conn.client.get("taxonomy-hype")
        """
        conn = await self.acquire(role)
        unusable = False
        try:
            yield conn
        except TRANSIENT_ERRORS:
            unusable = True
            raise
        finally:
            await self.release(conn, close=unusable)

    async def ping(self, role: ConnectionRole | str = ConnectionRole.PRIMARY) -> bool:
        """
        Check backend health for a role.

        Returns:
            True if the backend answered, False otherwise
        """
        try:
            async with self.connection(role) as conn:
                return bool(await conn.client.ping())
        except (CacheConnectionError, redis.RedisError) as e:
            logger.warning(
                "redis_ping_failed",
                role=ConnectionRole(role).value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def _teardown(self, connection: Connection) -> None:
        if self._connections.get(connection.role) is connection:
            del self._connections[connection.role]

        if not connection.is_connected:
            return

        connection.is_connected = False
        await self._close_client(connection.client)
        logger.debug("redis_client_closed", role=connection.role.value)

    async def _close_client(self, client: Any) -> None:
        try:
            await client.aclose()
        except redis.RedisError as e:
            logger.error(
                "redis_close_error",
                error=str(e),
                error_type=type(e).__name__,
            )

    async def close(self) -> None:
        """
        Close every tracked connection.

        Should be called during application shutdown.
        """
        for connection in list(self._connections.values()):
            await self._teardown(connection)
        logger.info("redis_registry_closed")
