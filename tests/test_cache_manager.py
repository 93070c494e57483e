"""
Tests for the cache manager module.
"""
import unittest
import sys
import os
import functools
from unittest.mock import MagicMock

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cache_manager import CacheManager, cache_manager
from utils import ResponseCache


class TestCacheManager(unittest.TestCase):
    """Test cases for the CacheManager class."""

    def setUp(self):
        """Set up test fixtures."""
        self.cache_manager = CacheManager()

    def test_singleton_instance(self):
        """The module-level cache_manager is shared; new instances are independent."""
        self.assertIsInstance(cache_manager, CacheManager)
        self.assertIsNot(cache_manager, CacheManager())

    def test_register_func_cache(self):
        """Test registering a function cache."""
        mock_func = MagicMock()
        mock_func.cache_clear = MagicMock()

        self.cache_manager.register_func_cache("test_func", mock_func)

        self.assertIn("test_func", self.cache_manager._func_caches)
        self.assertEqual(self.cache_manager._func_caches["test_func"], mock_func)

    def test_register_func_cache_without_cache_clear(self):
        """Plain functions are not registered."""
        def plain(x):
            return x

        self.cache_manager.register_func_cache("plain", plain)
        self.assertNotIn("plain", self.cache_manager._func_caches)

    def test_register_response_cache(self):
        cache = ResponseCache(schedule_eviction=False)
        self.cache_manager.register_response_cache("api", cache)
        self.assertIs(self.cache_manager._response_caches["api"], cache)


class TestCacheManagerAsync(unittest.IsolatedAsyncioTestCase):
    """Test cases for the async methods of CacheManager."""

    async def asyncSetUp(self):
        self.cache_manager = CacheManager()
        self.response_cache = ResponseCache(schedule_eviction=False)
        await self.response_cache.put("a", 1)
        await self.response_cache.put("b", 2)
        self.cache_manager.register_response_cache("api", self.response_cache)

    async def test_clear_all_caches(self):
        """Test clearing response and function caches together."""
        @functools.lru_cache(maxsize=8)
        def square(x):
            return x * x

        square(3)
        self.cache_manager.register_func_cache("square", square)

        results = await self.cache_manager.clear_all_caches()

        self.assertEqual(results["response_cache_api"], 2)
        self.assertEqual(results["function_caches_cleared"], 1)
        self.assertEqual(await self.response_cache.size(), 0)
        self.assertEqual(square.cache_info().currsize, 0)

    async def test_clear_cache_by_name(self):
        mock_func = MagicMock()
        mock_func.cache_clear = MagicMock()
        self.cache_manager.register_func_cache("func", mock_func)

        self.assertEqual(await self.cache_manager.clear_cache_by_name("api"), 2)
        self.assertEqual(await self.cache_manager.clear_cache_by_name("func"), "cleared")
        mock_func.cache_clear.assert_called_once()

    async def test_clear_unknown_cache(self):
        with self.assertRaises(ValueError):
            await self.cache_manager.clear_cache_by_name("missing")

    async def test_get_stats(self):
        """Test getting cache statistics."""
        mock_func = MagicMock()
        mock_func.cache_clear = MagicMock()
        mock_func.cache_info = MagicMock(return_value=MagicMock(hits=10, misses=5, maxsize=128, currsize=15))
        self.cache_manager.register_func_cache("test_func", mock_func)

        stats = await self.cache_manager.get_stats()

        self.assertEqual(stats["func_cache_test_func"]["hits"], 10)
        self.assertAlmostEqual(stats["func_cache_test_func"]["hit_ratio"], 10 / 15)
        self.assertEqual(stats["response_cache_api"]["size"], 2)


if __name__ == '__main__':
    unittest.main()
