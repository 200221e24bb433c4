"""
loader.py - access to the JSON meta-schemas packaged with contract_creator.

Public API
----------
load_schema(name) : fresh, deep-copied mapping for a packaged schema file
"""

from __future__ import annotations

import copy
import json
from functools import lru_cache
from importlib import resources
from typing import Any

__all__ = ["load_schema", "DATA_CONTRACT_META_SCHEMA", "DOCUMENT_META_SCHEMA"]

DATA_CONTRACT_META_SCHEMA = "data_contract_meta_schema.json"
DOCUMENT_META_SCHEMA = "document_meta_schema.json"


@lru_cache(maxsize=None)
def _read(name: str) -> dict[str, Any]:
    """Read & parse a packaged schema, raising crisp errors on failure."""
    resource = resources.files("contract_creator") / "schemas" / name
    try:
        text = resource.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Schema '{name}' not found in package data") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in packaged schema {name}: {exc}") from exc


def load_schema(name: str) -> dict[str, Any]:
    return copy.deepcopy(_read(name))
