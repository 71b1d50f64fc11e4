"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Storage backends behind the cache manager.
"""

from .base import CacheBackend, escape_redis_glob, glob_to_regex
from .inmemory import InMemoryCacheBackend
from .redis import RedisCacheBackend

__all__ = [
    "CacheBackend",
    "InMemoryCacheBackend",
    "RedisCacheBackend",
    "glob_to_regex",
    "escape_redis_glob",
]
