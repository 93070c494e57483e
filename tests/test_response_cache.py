"""
Tests for the time-expiring ResponseCache.
"""
import unittest
import sys
import os
import asyncio

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from exceptions import TransportError
from utils import ResponseCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestResponseCache(unittest.IsolatedAsyncioTestCase):
    """Test cases for ResponseCache with an injected clock."""

    async def asyncSetUp(self):
        self.clock = FakeClock()
        self.cache = ResponseCache(ttl_seconds=300, clock=self.clock, schedule_eviction=False)
        self.calls = 0

    async def _loader(self):
        self.calls += 1
        return {"items": [self.calls]}

    async def test_invalid_ttl(self):
        with self.assertRaises(ValueError):
            ResponseCache(ttl_seconds=0)

    async def test_put_and_get(self):
        await self.cache.put(("videos", "a"), {"items": []})
        self.assertEqual(await self.cache.get(("videos", "a")), {"items": []})
        self.assertIsNone(await self.cache.get(("videos", "b")))

    async def test_get_or_fetch_deduplicates_within_ttl(self):
        first = await self.cache.get_or_fetch("k", self._loader)
        self.clock.advance(299)
        second = await self.cache.get_or_fetch("k", self._loader)

        self.assertEqual(self.calls, 1)
        self.assertEqual(first, second)

    async def test_entry_expires_after_ttl(self):
        await self.cache.get_or_fetch("k", self._loader)
        self.clock.advance(300)
        value = await self.cache.get_or_fetch("k", self._loader)

        self.assertEqual(self.calls, 2)
        self.assertEqual(value, {"items": [2]})
        stats = await self.cache.get_stats()
        self.assertEqual(stats["ttl_expirations"], 1)

    async def test_distinct_keys_do_not_collide(self):
        await self.cache.get_or_fetch(("playlistItems", "PL1", 0), self._loader)
        await self.cache.get_or_fetch(("playlistItems", "PL1", 1), self._loader)
        await self.cache.get_or_fetch(("playlistItems", "PL2", 0), self._loader)
        self.assertEqual(self.calls, 3)
        self.assertEqual(await self.cache.size(), 3)

    async def test_error_payloads_are_cached(self):
        async def error_loader():
            self.calls += 1
            return {"error": {"message": "Backend Error"}}

        await self.cache.get_or_fetch("k", error_loader)
        value = await self.cache.get_or_fetch("k", error_loader)
        self.assertEqual(self.calls, 1)
        self.assertEqual(value["error"]["message"], "Backend Error")

    async def test_loader_exceptions_are_not_cached(self):
        async def failing_loader():
            self.calls += 1
            raise TransportError("network down")

        with self.assertRaises(TransportError):
            await self.cache.get_or_fetch("k", failing_loader)
        value = await self.cache.get_or_fetch("k", self._loader)

        self.assertEqual(self.calls, 2)
        self.assertEqual(value, {"items": [2]})

    async def test_concurrent_fetches_share_one_load(self):
        async def slow_loader():
            self.calls += 1
            await asyncio.sleep(0.01)
            return "value"

        results = await asyncio.gather(*(self.cache.get_or_fetch("k", slow_loader) for _ in range(5)))
        self.assertEqual(results, ["value"] * 5)
        self.assertEqual(self.calls, 1)

    async def test_key_locks_released_after_expiry(self):
        cache = ResponseCache(ttl_seconds=1, clock=self.clock, schedule_eviction=False)
        for i in range(1000):
            await cache.get_or_fetch(("videos", f"v{i}"), self._loader)
        self.clock.advance(2)
        for i in range(1000):
            self.assertIsNone(await cache.get(("videos", f"v{i}")))

        self.assertEqual(len(cache._key_locks), 0)
        self.assertEqual(len(cache._lock_users), 0)
        self.assertEqual(await cache.size(), 0)

    async def test_clear_during_fetch_keeps_waiters_deduplicated(self):
        started = asyncio.Event()
        release = asyncio.Event()

        async def blocking_loader():
            self.calls += 1
            started.set()
            await release.wait()
            return "value"

        first = asyncio.create_task(self.cache.get_or_fetch("k", blocking_loader))
        await started.wait()
        await self.cache.clear()
        second = asyncio.create_task(self.cache.get_or_fetch("k", blocking_loader))
        await asyncio.sleep(0)
        release.set()

        self.assertEqual(await asyncio.gather(first, second), ["value", "value"])
        self.assertEqual(self.calls, 1)
        self.assertEqual(len(self.cache._key_locks), 0)

    async def test_remove_and_clear(self):
        await self.cache.put("a", 1)
        await self.cache.put("b", 2)

        self.assertTrue(await self.cache.remove("a"))
        self.assertFalse(await self.cache.remove("a"))
        self.assertEqual(await self.cache.clear(), 1)
        self.assertEqual(await self.cache.size(), 0)

    async def test_stats(self):
        await self.cache.get_or_fetch("k", self._loader)
        await self.cache.get_or_fetch("k", self._loader)
        stats = await self.cache.get_stats()

        self.assertEqual(stats["hits"], 1)
        self.assertEqual(stats["misses"], 1)
        self.assertEqual(stats["size"], 1)
        self.assertEqual(stats["hit_ratio"], 0.5)
        self.assertEqual(stats["ttl_seconds"], 300)


class TestResponseCacheScheduledEviction(unittest.IsolatedAsyncioTestCase):
    """Entries are removed at expiry even when never read again."""

    async def test_entry_evicted_by_timer(self):
        cache = ResponseCache(ttl_seconds=0.05)
        await cache.put("k", "v")
        self.assertEqual(await cache.size(), 1)

        await asyncio.sleep(0.15)

        self.assertEqual(await cache.size(), 0)
        stats = await cache.get_stats()
        self.assertEqual(stats["scheduled_evictions"], 1)

    async def test_overwrite_rearms_timer(self):
        cache = ResponseCache(ttl_seconds=0.1)
        await cache.put("k", "old")
        await asyncio.sleep(0.06)
        await cache.put("k", "new")
        await asyncio.sleep(0.06)

        self.assertEqual(await cache.get("k"), "new")
        await cache.clear()


if __name__ == '__main__':
    unittest.main()
