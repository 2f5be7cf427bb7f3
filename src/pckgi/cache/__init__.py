"""
Cache module for storing scanner results.

Provides in-memory caching with TTL-based expiration.
"""

from pckgi.cache.memory import CacheEntry, ResultCache

__all__ = ["CacheEntry", "ResultCache"]
