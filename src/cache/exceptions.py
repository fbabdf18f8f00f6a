"""
Exceptions raised by the cache layer.

Connection and operation failures are always logged where they happen
and then raised to the caller. Decode failures are never raised: a value
that cannot be parsed as JSON is returned as the raw string.
"""

from typing import Optional


class CacheError(Exception):
    """
    Base exception for all cache related errors.

    Use this for catching any cache failure regardless of its origin.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class CacheConnectionError(CacheError):
    """
    Raised when a connection to the backend cannot be established.

    This occurs when:
    - The backend refuses or times out the connection
    - The backend reports an error before it is ready (e.g. bad password)
    - The reconnection limit (attempts or retry time) was exceeded

    Attributes:
        role: Connection role that failed
        host: Backend host
        port: Backend port
        attempts: Number of connection attempts made

    Example:
        >>> raise CacheConnectionError("primary", "localhost", 6379, attempts=11)
    """

    def __init__(
        self,
        role: str,
        host: str,
        port: int,
        attempts: int = 1,
        message: Optional[str] = None,
    ) -> None:
        self.role = role
        self.host = host
        self.port = port
        self.attempts = attempts

        if message is None:
            message = (
                f"Failed to connect to backend for role '{role}' "
                f"at {host}:{port} after {attempts} attempt(s)"
            )

        super().__init__(message)


class CacheOperationError(CacheError):
    """
    Raised when a backend call fails after a connection was acquired.

    Also raised when a value cannot be serialized for storage.

    Attributes:
        operation: Operation name (get, set, delete, exists)
        key: Backend key the operation targeted
    """

    def __init__(self, operation: str, key: str, message: Optional[str] = None) -> None:
        self.operation = operation
        self.key = key

        if message is None:
            message = f"Cache {operation} failed for key '{key}'"

        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (operation={self.operation}, key={self.key})"
