#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Cache Manager for Playlength.

Registry of the application's caches so they can be cleared and inspected
together (used by the /clear-caches and /health endpoints).
"""

from typing import Any, Callable, Dict

from logging_config import StructuredLogger

logger = StructuredLogger(__name__)


class CacheManager:
    """Centralized cache registry.

    Two kinds of caches are tracked: response caches (objects with async
    ``clear()`` and ``get_stats()``, e.g. ResponseCache) and functions
    decorated with ``functools.lru_cache``.
    """

    def __init__(self):
        self._response_caches: Dict[str, Any] = {}
        self._func_caches: Dict[str, Callable] = {}

    def register_response_cache(self, name: str, cache: Any) -> None:
        """Register a cache exposing async ``clear()`` and ``get_stats()``."""
        self._response_caches[name] = cache
        logger.debug(f"Registered response cache: {name}")

    def register_func_cache(self, name: str, func: Callable) -> None:
        """Register a function with @lru_cache decorator."""
        if hasattr(func, 'cache_clear'):
            self._func_caches[name] = func
            logger.debug(f"Registered function cache: {name}")
        else:
            logger.warning(f"Function {name} does not have cache_clear method, not registering")

    async def clear_all_caches(self) -> Dict[str, Any]:
        """Clear all registered caches.

        Returns:
            dict: Entries removed per response cache and the number of function caches cleared
        """
        logger.info("Clearing all registered caches...")
        results: Dict[str, Any] = {}

        for name, cache in self._response_caches.items():
            results[f"response_cache_{name}"] = await cache.clear()

        for func in self._func_caches.values():
            func.cache_clear()
        results["function_caches_cleared"] = len(self._func_caches)

        logger.info(f"Cache clearing complete. Results: {results}")
        return results

    async def clear_cache_by_name(self, name: str) -> Any:
        """Clear a specific cache by name.

        Raises:
            ValueError: If the cache name is not found
        """
        if name in self._response_caches:
            count = await self._response_caches[name].clear()
            logger.info(f"Cleared response cache {name}: {count} items removed")
            return count
        if name in self._func_caches:
            self._func_caches[name].cache_clear()
            logger.info(f"Cleared function cache {name}")
            return "cleared"
        logger.warning(f"Cache {name} not found")
        raise ValueError(f"Cache {name} not found")

    async def get_stats(self) -> Dict[str, Any]:
        """Get statistics for all registered caches."""
        stats: Dict[str, Any] = {}

        for name, cache in self._response_caches.items():
            stats[f"response_cache_{name}"] = await cache.get_stats()

        for name, func in self._func_caches.items():
            if hasattr(func, 'cache_info'):
                info = func.cache_info()
                lookups = info.hits + info.misses
                stats[f"func_cache_{name}"] = {
                    "hits": info.hits,
                    "misses": info.misses,
                    "maxsize": info.maxsize,
                    "currsize": info.currsize,
                    "hit_ratio": info.hits / lookups if lookups > 0 else 0
                }
            else:
                stats[f"func_cache_{name}"] = "No cache_info method available"

        return stats


# Create a singleton instance
cache_manager = CacheManager()
