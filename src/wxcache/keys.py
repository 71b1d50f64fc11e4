"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Key encoding for namespaced cache entries.
"""

from __future__ import annotations

import re

from .types import CacheKey, KeyLike

DEFAULT_KEY_PREFIX = "weather_app"

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_identifier(identifier: str) -> str:
    """
    Lowercase an identifier and replace each whitespace run with ``_``.

    Leading and trailing whitespace is not trimmed, so ``"  Paris "``
    becomes ``"_paris_"``.
    """
    return _WHITESPACE_RUN.sub("_", identifier.lower())


def coordinate_identifier(lat: float, lon: float, *, precision: int = 4) -> str:
    """Render a ``"lat,lon"`` identifier with fixed decimal precision."""
    if precision < 0:
        raise ValueError("precision must be >= 0")
    return f"{lat:.{precision}f},{lon:.{precision}f}"


class KeyEncoder:
    """Builds ``<prefix>:<namespace>:<identifier>`` cache keys."""

    def __init__(self, prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def make_key(self, namespace: str, identifier: str) -> str:
        return f"{self._prefix}:{namespace}:{identifier}"

    def namespace_pattern(self, namespace: str) -> str:
        """Glob pattern matching every key of one namespace."""
        return f"{self._prefix}:{namespace}:*"

    def resolve(self, key: KeyLike) -> str:
        """
        Turn a caller key into the stored key string.

        Plain strings are used verbatim. ``CacheKey`` pairs get the prefix
        but no identifier normalization.
        """
        if isinstance(key, CacheKey):
            return self.make_key(key.namespace, key.identifier)
        return key
