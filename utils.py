#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
General utilities and helper classes for Playlength.

Includes the time-expiring response cache shared by all upstream requests
and a performance timer for logging slow operations.
"""

import asyncio
import time
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

from config import config
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

_MISSING = object()


# --- Performance Timer ---

@contextmanager
def performance_timer(operation_name: str, threshold_ms: float = 100.0):
    """Context manager for timing operations with threshold-based logging.

    Logs the duration of the enclosed code block. Logs at INFO level if duration
    exceeds threshold_ms, WARNING if it significantly exceeds it, otherwise DEBUG.

    Args:
        operation_name: A descriptive name for the operation being timed.
        threshold_ms: Threshold in milliseconds. Defaults to 100ms.
    """
    start_time = time.monotonic()
    try:
        yield
    finally:
        duration_ms = (time.monotonic() - start_time) * 1000
        log_data = {
            "operation": operation_name,
            "duration_ms": round(duration_ms, 2),
            "threshold_ms": threshold_ms,
        }
        if duration_ms > threshold_ms * 10:
            logger.warning(f"SLOW OPERATION: '{operation_name}' took {duration_ms:.2f}ms", **log_data)
        elif duration_ms > threshold_ms:
            logger.info(f"Performance watch: '{operation_name}' took {duration_ms:.2f}ms", **log_data)
        else:
            logger.debug(f"Performance: '{operation_name}' completed in {duration_ms:.2f}ms", **log_data)


# --- Response Cache ---

class ResponseCache:
    """Time-expiring cache for raw upstream responses.

    Deduplicates identical requests within the TTL window. Values are stored
    as returned by the loader, error payloads included; only loader exceptions
    bypass the cache. Each entry is evicted automatically at expiry (via the
    running event loop) and is also checked against ``clock`` on every read,
    so an injected clock fully controls expiry in tests.

    Concurrent ``get_or_fetch`` calls for the same key are serialized with a
    per-key lock, so at most one loader runs per key.
    """

    def __init__(self, ttl_seconds: float = config.RESPONSE_CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic,
                 schedule_eviction: bool = True):
        """Initialize the cache.

        Args:
            ttl_seconds: Lifetime of each entry in seconds. Must be > 0.
            clock: Monotonic time source in seconds.
            schedule_eviction: Whether to arm a timer per entry that deletes it at
                               expiry even if it is never read again.
        """
        if ttl_seconds <= 0:
            raise ValueError("ResponseCache ttl_seconds must be greater than 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._schedule_eviction = schedule_eviction

        self._entries: Dict[Hashable, Any] = {}
        self._expiry: Dict[Hashable, float] = {}
        self._timers: Dict[Hashable, asyncio.TimerHandle] = {}
        self._lock_users: Dict[Hashable, int] = {}
        self._key_locks: Dict[Hashable, asyncio.Lock] = {}

        self._stats = {
            "hits": 0,
            "misses": 0,
            "ttl_expirations": 0,
            "scheduled_evictions": 0,
        }
        logger.debug(f"ResponseCache initialized: ttl={ttl_seconds}s")

    def _lookup(self, key: Hashable) -> Any:
        """Return the live entry for key or _MISSING, dropping it if expired."""
        if key not in self._entries:
            self._stats["misses"] += 1
            return _MISSING
        if self._clock() >= self._expiry[key]:
            self._stats["ttl_expirations"] += 1
            self._stats["misses"] += 1
            self._drop(key)
            return _MISSING
        self._stats["hits"] += 1
        return self._entries[key]

    def _store(self, key: Hashable, value: Any) -> None:
        self._drop(key)
        self._entries[key] = value
        self._expiry[key] = self._clock() + self.ttl_seconds
        if self._schedule_eviction:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return  # No loop, rely on lazy expiry
            self._timers[key] = loop.call_later(self.ttl_seconds, self._evict_scheduled, key)

    def _evict_scheduled(self, key: Hashable) -> None:
        self._timers.pop(key, None)
        if key in self._entries:
            self._entries.pop(key, None)
            self._expiry.pop(key, None)
            self._stats["scheduled_evictions"] += 1

    def _drop(self, key: Hashable) -> None:
        self._entries.pop(key, None)
        self._expiry.pop(key, None)
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    async def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value for key, or None if absent or expired."""
        value = self._lookup(key)
        return None if value is _MISSING else value

    async def put(self, key: Hashable, value: Any) -> None:
        """Store value under key with a fresh expiry."""
        self._store(key, value)

    async def get_or_fetch(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for key, calling ``loader`` only on a miss.

        The per-key lock lives only while callers for that key are in flight,
        so the lock map never outgrows the number of concurrent fetches.

        Args:
            key: Request signature (endpoint and parameters).
            loader: Coroutine function performing the upstream request.

        Returns:
            The cached or freshly loaded value.
        """
        lock = self._key_locks.get(key)
        if lock is None:
            lock = self._key_locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                cached = self._lookup(key)
                if cached is not _MISSING:
                    logger.debug(f"Response cache hit: {key!r:.120}")
                    return cached

                logger.debug(f"Response cache miss: {key!r:.120}")
                value = await loader()
                self._store(key, value)
                return value
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._key_locks[key]

    async def remove(self, key: Hashable) -> bool:
        """Remove a key. Returns True if it was present."""
        present = key in self._entries
        self._drop(key)
        return present

    async def clear(self) -> int:
        """Remove all entries and cancel their timers.

        Locks of in-flight fetches are left alone, so a caller waiting on one
        still sees the value its owner stores.

        Returns:
            int: The number of entries removed.
        """
        count = len(self._entries)
        for key in list(self._entries):
            self._drop(key)
        return count

    async def size(self) -> int:
        return len(self._entries)

    async def get_stats(self) -> Dict[str, Any]:
        """Get cache usage statistics."""
        stats = self._stats.copy()
        stats["size"] = len(self._entries)
        stats["ttl_seconds"] = self.ttl_seconds
        total_lookups = stats["hits"] + stats["misses"]
        stats["hit_ratio"] = (stats["hits"] / total_lookups) if total_lookups > 0 else 0.0
        return stats
