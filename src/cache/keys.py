"""Cache key namespacing.

Every key presented to a named cache is lower-cased and prefixed with the
cache's namespace tag before it reaches the backend:

    taxonomy-<key>
    tokenTemplate-<key>

Unrecognized namespaces fall back to an empty tag ("-<key>") instead of
raising.
"""

from enum import Enum
from typing import Dict

import structlog

logger = structlog.get_logger(__name__)

KEY_SEP = "-"


class CacheNamespace(str, Enum):
    """Namespace tags recognized by the named caches."""

    TAXONOMY = "taxonomy"
    TOKEN_TEMPLATE = "tokenTemplate"


NAMESPACE_TAGS = tuple(namespace.value for namespace in CacheNamespace)


def namespace_tag(namespace: str) -> str:
    """Return the tag for a namespace, or "" if it is not recognized."""
    value = namespace.value if isinstance(namespace, CacheNamespace) else namespace
    if value in NAMESPACE_TAGS:
        return value

    logger.debug("unknown_cache_namespace", namespace=value)
    return ""


def namespaced_key(key: str, namespace: str) -> str:
    """
    Build the backend key for a cache key in a namespace.

    Args:
        key: Caller-supplied key (any case)
        namespace: Namespace tag of the cache

    Returns:
        Key in format: {tag}-{lower-cased key}

    Example:
        >>> namespaced_key("Hype", "taxonomy")
        'taxonomy-hype'
        >>> namespaced_key("Hype", "other")
        '-hype'
    """
    return f"{namespace_tag(namespace)}{KEY_SEP}{key.lower()}"


def parse_namespaced_key(backend_key: str) -> Dict[str, str]:
    """
    Split a backend key back into its namespace tag and key.

    Args:
        backend_key: Key as stored in the backend

    Returns:
        Dictionary with "namespace" and "key"

    Raises:
        ValueError: If the key carries no separator

    Example:
        >>> parse_namespaced_key("taxonomy-hype")
        {'namespace': 'taxonomy', 'key': 'hype'}
    """
    tag, sep, key = backend_key.partition(KEY_SEP)

    if not sep:
        raise ValueError(
            f"Invalid cache key format: {backend_key}. "
            f"Expected '{{namespace}}{KEY_SEP}{{key}}'"
        )

    return {"namespace": tag, "key": key}
