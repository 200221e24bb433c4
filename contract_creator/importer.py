"""
importer.py - rebuild the editable model from a serialized contract
===================================================================

Public API
----------
import_contract(serialized) -> list[DocumentType]
    Parse *serialized* (JSON text or a mapping) and return a brand-new list
    of document types, one per top-level key, in document order.  The result
    is meant to replace the caller's model wholesale.

import_document_type / import_property / import_index
    The per-node building blocks, usable on already-parsed fragments.

Failures
--------
* :class:`MalformedContractError` - the text is not JSON, or a value that
  must be an object / array / string / boolean is something else.  The
  error carries the JSON pointer of the offending value.
* :class:`UnknownTypeError` - a property's ``type`` is not one of the six
  supported names.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .compiler import derive_required
from .errors import MalformedContractError
from .model import (
    CONSTRAINT_GROUPS,
    DataType,
    DocumentType,
    Index,
    IndexProperty,
    Property,
    SortDirection,
)
from .parser import json_pointer, parse_document

__all__ = [
    "import_contract",
    "import_document_type",
    "import_property",
    "import_index",
]

log = logging.getLogger(__name__)

# model field -> canonical key, for the type-specific constraints
_FIELD_KEYS: dict[str, str] = {
    "min_length": "minLength",
    "max_length": "maxLength",
    "pattern": "pattern",
    "format": "format",
    "minimum": "minimum",
    "maximum": "maximum",
    "byte_array": "byteArray",
    "min_items": "minItems",
    "max_items": "maxItems",
    "min_properties": "minProperties",
    "max_properties": "maxProperties",
}
_TEXT_FIELDS = {"pattern", "format"}
_SIGNED_FIELDS = {"minimum", "maximum"}

# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #

def _coerce(field_name: str, value: Any) -> Any:
    """Return *value* if it fits *field_name*, else ``None`` (value ignored)."""
    if field_name == "byte_array":
        return value if isinstance(value, bool) else None
    if field_name in _TEXT_FIELDS:
        return value if isinstance(value, str) else None
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if value < 0 and field_name not in _SIGNED_FIELDS:
        return None
    return value


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _required_names(obj: Mapping[str, Any]) -> set[str]:
    required = obj.get("required")
    if not isinstance(required, list):
        return set()
    return {name for name in required if isinstance(name, str)}


def _expect(value: Any, kind: type, what: str, path: str) -> Any:
    if not isinstance(value, kind):
        raise MalformedContractError(
            f"{what} must be {kind.__name__}, got {type(value).__name__}", path
        )
    return value

# --------------------------------------------------------------------------- #
# Properties                                                                  #
# --------------------------------------------------------------------------- #

def _import_properties(
    raw: Any, required: set[str], path: str
) -> list[Property]:
    _expect(raw, dict, "'properties'", path)
    return [
        import_property(name, value, required=name in required, path=f"{path}{json_pointer(name)}")
        for name, value in raw.items()
    ]


def import_property(
    name: str, value: Any, *, required: bool = False, path: str = ""
) -> Property:
    """Build a :class:`Property` from its property-schema object."""
    _expect(value, dict, f"property '{name}'", path)

    if "type" in value:
        data_type = DataType.from_schema(value["type"], f"{path}/type")
    else:
        data_type = DataType.STRING

    kwargs: dict[str, Any] = {
        "name": name,
        "data_type": data_type,
        "required": required,
        "description": _text(value.get("description")),
        "comment": _text(value.get("$comment")),
    }
    own = CONSTRAINT_GROUPS[data_type]
    for field_name, key in _FIELD_KEYS.items():
        if key not in value:
            continue
        if field_name not in own:
            log.debug("%s: ignoring '%s' on a %s property", path, key, data_type.schema_name)
            continue
        kwargs[field_name] = _coerce(field_name, value[key])

    if data_type is DataType.OBJECT:
        children = _import_properties(
            value.get("properties", {}), _required_names(value), f"{path}/properties"
        )
        kwargs["properties"] = children
        kwargs["required_properties"] = derive_required(children)

    return Property(**kwargs)

# --------------------------------------------------------------------------- #
# Indices                                                                     #
# --------------------------------------------------------------------------- #

def _import_index_property(raw: Any, path: str) -> IndexProperty:
    _expect(raw, dict, "index property", path)
    entry = IndexProperty()
    # more than one key: the last one wins
    for prop_path, direction in raw.items():
        try:
            entry = IndexProperty(prop_path, SortDirection(direction))
        except ValueError as exc:
            raise MalformedContractError(
                f"sort direction must be 'asc' or 'desc', got {direction!r}",
                f"{path}{json_pointer(prop_path)}",
            ) from exc
    return entry


def import_index(value: Any, path: str = "") -> Index:
    """Build an :class:`Index` from ``{name, properties, unique}``."""
    _expect(value, dict, "index", path)
    name = _expect(value.get("name", ""), str, "index name", f"{path}/name")
    unique = _expect(value.get("unique", False), bool, "'unique'", f"{path}/unique")
    raw_props = _expect(value.get("properties", []), list, "index properties", f"{path}/properties")
    return Index(
        name=name,
        properties=[
            _import_index_property(p, f"{path}/properties/{i}")
            for i, p in enumerate(raw_props)
        ],
        unique=unique,
    )

# --------------------------------------------------------------------------- #
# Document types                                                              #
# --------------------------------------------------------------------------- #

def import_document_type(name: str, value: Any) -> DocumentType:
    path = json_pointer(name)
    _expect(value, dict, f"document type '{name}'", path)

    properties = _import_properties(
        value.get("properties", {}), _required_names(value), f"{path}/properties"
    )
    raw_indices = _expect(value.get("indices", []), list, "'indices'", f"{path}/indices")
    indices = [import_index(v, f"{path}/indices/{i}") for i, v in enumerate(raw_indices)]
    comment = _expect(value.get("$comment", ""), str, "'$comment'", f"{path}/$comment")

    doc_type = DocumentType(name=name, properties=properties, indices=indices, comment=comment)
    doc_type.required = derive_required(properties)
    return doc_type


def import_contract(serialized: str | bytes | Mapping[str, Any]) -> list[DocumentType]:
    """Return the document types described by *serialized*."""
    raw = parse_document(serialized)
    document_types = [import_document_type(name, value) for name, value in raw.items()]
    log.debug("imported %d document type(s)", len(document_types))
    return document_types
