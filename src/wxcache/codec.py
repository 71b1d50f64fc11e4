"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

JSON codec used at the store's serialize/deserialize boundary.
"""

from __future__ import annotations

import json
from typing import Protocol, cast

from .errors import CacheSerializationError
from .types import JSONValue


class CacheCodec(Protocol):
    """Converts payloads to and from the string form held by backends."""

    def dumps(self, value: JSONValue) -> str: ...

    def loads(self, raw: str | bytes) -> JSONValue: ...


class JSONCodec:
    """Strict JSON codec; NaN/Infinity and non-JSON types are rejected."""

    def dumps(self, value: JSONValue) -> str:
        try:
            return json.dumps(
                value, ensure_ascii=False, separators=(",", ":"), allow_nan=False
            )
        except (TypeError, ValueError) as exc:
            # ValueError covers circular references and NaN.
            raise CacheSerializationError(f"Value is not JSON-serializable: {exc}") from exc

    def loads(self, raw: str | bytes) -> JSONValue:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return cast(JSONValue, json.loads(raw))
        except ValueError as exc:
            raise CacheSerializationError(f"Stored value is not valid JSON: {exc}") from exc
