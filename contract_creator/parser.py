"""
parser.py - JSON text / mapping input loader
============================================

Public API
----------
`parse_document(source) -> dict`
    Convert a serialized contract (JSON text, ``bytes`` or an already-parsed
    ``Mapping``) into a fresh, plain ``dict``.  Anything that does not decode
    to a JSON object raises :class:`MalformedContractError`; the caller never
    receives an empty stand-in for bad input.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Mapping

from .errors import MalformedContractError

__all__ = ["parse_document", "json_pointer"]


def json_pointer(*parts: Any) -> str:
    """Build an RFC 6901 pointer from *parts* (``"/a/b~1c/0"``)."""
    return "".join(
        "/" + str(p).replace("~", "~0").replace("/", "~1") for p in parts
    )


def parse_document(source: str | bytes | Mapping[str, Any]) -> dict[str, Any]:
    """Return *source* as a plain ``dict`` (no structural validation)."""

    # Mapping - already parsed ----------------------------------------------
    if isinstance(source, Mapping):
        return copy.deepcopy(dict(source))

    if isinstance(source, (bytes, bytearray)):
        try:
            source = bytes(source).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedContractError(f"Contract text is not UTF-8: {exc}") from exc
    if not isinstance(source, str):
        raise TypeError(f"Unsupported type for parse_document: {type(source)}")

    # JSON literal ------------------------------------------------------------
    try:
        parsed = json.loads(source)
    except json.JSONDecodeError as exc:
        raise MalformedContractError(f"Invalid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise MalformedContractError(
            f"expected a JSON object at the top level, got {type(parsed).__name__}"
        )
    return parsed
