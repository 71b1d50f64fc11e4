"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy for the cache subsystem.

These exceptions are raised by internal layers and caught at the
``CacheManager`` boundary; callers of the manager never see them.
"""

from __future__ import annotations


class CacheError(RuntimeError):
    """Base class for cache subsystem failures."""


class CacheSerializationError(CacheError):
    """Raised when a value cannot cross the JSON storage boundary."""


class CacheBackendError(CacheError):
    """Raised when the storage backend cannot complete an operation."""
