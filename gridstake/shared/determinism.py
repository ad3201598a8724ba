"""Deterministic hashing of ledger state.

Two markets fed the same call sequence must produce the same digest, so
serialization uses sorted keys, compact separators and tuple keys rendered
as JSON arrays (``'["a","b"]'``).
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Any


def _serialize_value(val: Any) -> Any:
    if val is None:
        return None
    if hasattr(val, "model_dump"):
        return _serialize_value(val.model_dump(mode="json"))
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, dict):
        return {_serialize_key(k): _serialize_value(v) for k, v in val.items()}
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, (int, str, bool)):
        return val
    return str(val)


def _serialize_key(key: Any) -> str:
    if isinstance(key, tuple):
        return json.dumps([_serialize_value(part) for part in key], separators=(",", ":"))
    return str(key)


def canonical_json(data: Any) -> str:
    """Canonical JSON text for ``data``."""
    return json.dumps(_serialize_value(data), sort_keys=True, separators=(",", ":"))


def compute_hash(data: Any) -> str:
    """Hex SHA-256 of the canonical JSON form of ``data``."""
    return hashlib.sha256(canonical_json(data).encode("utf-8")).hexdigest()


__all__ = ["canonical_json", "compute_hash"]
