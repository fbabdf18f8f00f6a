"""
Structured logging configuration using structlog.

Emits JSON in production and colored console output in development.
Every event carries the service context bound at startup, and the redis
client library can be switched to DEBUG for connection troubleshooting.
"""
import logging
import sys
from typing import Any

import structlog

REDIS_LOGGER = "redis"


def build_processors(dev_mode: bool = False) -> list[Any]:
    """Return the structlog processor chain, ending in the output renderer."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if dev_mode:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def setup_logging(
    level: str = "INFO",
    redis_debug: bool = False,
    dev_mode: bool = False,
    **context: Any,
) -> None:
    """
    Configure structured logging for the service.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        redis_debug: Lower the redis client library logger to DEBUG
        dev_mode: Render human-readable console output instead of JSON
        **context: Fields bound to every event (app_name, exec_env, ...)

    Example:
        >>> setup_logging("INFO", redis_debug=True, app_name="sample-app", exec_env="dev")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    # redis-py logs through the standard library, not structlog
    logging.getLogger(REDIS_LOGGER).setLevel(logging.DEBUG if redis_debug else log_level)

    structlog.contextvars.clear_contextvars()
    if context:
        structlog.contextvars.bind_contextvars(**context)

    structlog.configure(
        processors=build_processors(dev_mode),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("cache_set", key="taxonomy-hype")
    """
    return structlog.get_logger(name)


def log_cache_operation(
    operation: str,
    key: str,
    duration_ms: float,
    error: str | None = None,
    **extra: Any,
) -> None:
    """
    Log a keyed cache operation in structured format.

    Successful operations are logged at debug level, failures at error level.

    Args:
        operation: Operation name (get, set, delete, exists)
        key: Backend key the operation targeted
        duration_ms: Round-trip time in milliseconds
        error: Error message if the operation failed
        **extra: Additional context to log

    Example:
        >>> log_cache_operation("get", "taxonomy-hype", 1.8, hit=True)
    """
    logger = get_logger("cache_operation")

    log_data = {
        "operation": operation,
        "key": key,
        "duration_ms": round(duration_ms, 2),
        "error": error,
        **extra,
    }

    if error:
        logger.error(f"cache_{operation}_failed", **log_data)
    else:
        logger.debug(f"cache_{operation}", **log_data)
