"""Named caches sharing one backend keyspace.

A NamespacedCache prefixes and lower-cases every key before delegating to
the CacheManager, so the taxonomy and template caches never collide.
"""

import asyncio
from typing import Any, Dict, Iterable, Mapping, Optional

import structlog

from src.cache.keys import CacheNamespace, namespaced_key
from src.cache.manager import CacheManager

logger = structlog.get_logger(__name__)


class NamespacedCache:
    """
    Cache view bound to one namespace tag.

    Attributes:
        manager: Keyed operations used for every call
        namespace: Namespace tag (unknown tags fall back to an empty prefix)
    """

    def __init__(self, manager: CacheManager, namespace: CacheNamespace | str) -> None:
        self.manager = manager
        self.namespace = namespace.value if isinstance(namespace, CacheNamespace) else namespace

    def build_key(self, cache_key: str) -> str:
        return namespaced_key(cache_key, self.namespace)

    async def save_to_cache(
        self, cache_key: str, value: Any, absolute_expiration: Optional[int] = None
    ) -> None:
        """Store value under cache_key, expiring after absolute_expiration seconds if given."""
        await self.manager.set(self.build_key(cache_key), value, absolute_expiration)

    async def get_from_cache(self, cache_key: str) -> Any:
        """Return the cached value, or None if absent."""
        return await self.manager.get(self.build_key(cache_key))

    async def remove_from_cache(self, cache_key: str) -> None:
        await self.manager.delete(self.build_key(cache_key))

    async def is_in_cache(self, cache_key: str) -> bool:
        """
        Return True if a non-null value is cached under cache_key.

        This reads the value rather than using EXISTS so that a stored
        JSON null still counts as absent.
        """
        return await self.get_from_cache(cache_key) is not None

    async def load_templates(self, templates: Mapping[str, Iterable[Mapping[str, Any]]]) -> int:
        """
        Bulk-load templates shaped as {"Template": [{"key": ..., "Value": ...}]}.

        Returns:
            Number of templates stored
        """
        entries = list(templates.get("Template", []))
        await asyncio.gather(
            *(self.save_to_cache(entry["key"], entry["Value"]) for entry in entries)
        )
        logger.info("templates_loaded", namespace=self.namespace, count=len(entries))
        return len(entries)


def build_caches(manager: CacheManager) -> Dict[str, NamespacedCache]:
    """Return one NamespacedCache per recognized namespace, keyed by tag."""
    return {
        namespace.value: NamespacedCache(manager, namespace) for namespace in CacheNamespace
    }
