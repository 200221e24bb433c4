"""
utils.py - shared, low-level hashing helpers for the contract-creator package.
"""

from __future__ import annotations

import enum
import hashlib
import json
from typing import Any

# --------------------------------------------------------------------------- #
# Hashing Utilities                                                           #
# --------------------------------------------------------------------------- #

def _json_safe(x: Any) -> Any:
    """Recursively prepare an object for deterministic JSON hashing."""
    if isinstance(x, dict):
        return {str(k): _json_safe(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_json_safe(v) for v in x]
    if isinstance(x, enum.Enum):
        return x.value
    if isinstance(x, bytes):
        return x.hex()
    return x


def _hash(obj: Any) -> str:
    """Return a deterministic SHA-256 hash for a Python object."""
    safe_obj = _json_safe(obj)
    encoded = json.dumps(safe_obj, sort_keys=True, separators=(",", ":")).encode()
    return hashlib.sha256(encoded).hexdigest()


def _sha256d(data: bytes) -> bytes:
    """Double SHA-256, as used for platform identifiers."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()
