"""Reconnection backoff policy for backend connection attempts.

This module decides how long to wait between failed connection attempts
and when to stop trying altogether.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

# Milestones that only produce log events
RETRY_TIME_WARNING_MS = 15_000
ATTEMPTS_WARNING = 10


def _is_connection_refused(error: Optional[BaseException]) -> bool:
    if error is None:
        return False
    if isinstance(error, ConnectionRefusedError):
        return True
    cause = error.__cause__ or error.__context__
    if isinstance(cause, ConnectionRefusedError):
        return True
    return "connection refused" in str(error).lower()


@dataclass(frozen=True)
class ReconnectionPolicy:
    """
    Linear backoff with a fixed ceiling and optional hard limits.

    The delay is attempt * step_ms, capped at ceiling_ms. It is
    non-decreasing in the attempt number.

    Attributes:
        step_ms: Delay added per attempt
        ceiling_ms: Upper bound for a single delay
        max_attempts: Give up once more attempts than this have failed (None = never)
        max_retry_time_ms: Give up once retry time exceeds this (None = never)
    """

    step_ms: int = 100
    ceiling_ms: int = 3000
    max_attempts: Optional[int] = 10
    max_retry_time_ms: Optional[int] = 15_000

    @classmethod
    def from_settings(cls, settings) -> "ReconnectionPolicy":
        return cls(
            max_attempts=settings.redis_reconnect_max_attempts,
            max_retry_time_ms=settings.redis_reconnect_max_time_ms,
        )

    def next_delay(
        self,
        error: Optional[BaseException],
        attempt: int,
        total_retry_time_ms: int,
    ) -> int:
        """
        Compute the delay before the next connection attempt.

        Args:
            error: Error raised by the failed attempt
            attempt: Number of failed attempts so far (1-based)
            total_retry_time_ms: Time spent retrying so far

        Returns:
            Delay in milliseconds

        Example:
            >>> ReconnectionPolicy().next_delay(None, 3, 250)
            300
        """
        if _is_connection_refused(error):
            logger.info("redis_connection_refused", attempt=attempt)

        if total_retry_time_ms > RETRY_TIME_WARNING_MS:
            logger.info("redis_retry_time_exhausted", total_retry_time_ms=total_retry_time_ms)

        if attempt > ATTEMPTS_WARNING:
            logger.info("redis_retry_attempts_exceeded", attempt=attempt)

        delay = min(max(attempt, 0) * self.step_ms, self.ceiling_ms)

        logger.info("redis_attempting_connection", attempt=attempt, delay_ms=delay)

        return delay

    def exhausted(self, attempt: int, total_retry_time_ms: int) -> bool:
        """Return True once another attempt would exceed a hard limit."""
        if self.max_attempts is not None and attempt > self.max_attempts:
            return True
        if self.max_retry_time_ms is not None and total_retry_time_ms > self.max_retry_time_ms:
            return True
        return False
