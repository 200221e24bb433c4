"""
compiler.py - turn the editable model into the canonical contract document
==========================================================================

Public API
----------
compile_contract(document_types, *, omit_zero=True) -> CompiledContract
    Compile every document type, in order, into a canonical fragment.

compile_document_type / compile_property / compile_index
    The per-node building blocks used by :func:`compile_contract`.

derive_required(properties) -> list[str]
    Names of the properties whose ``required`` flag is set.

sync_required(document_types) -> None
    Write the derived required lists back into the model.

Zero-valued numeric constraints
-------------------------------
By default a numeric constraint equal to ``0`` is treated like an unset one
and left out of the output, so ``min_length=0`` and ``min_length=None``
compile identically.  Pass ``omit_zero=False`` to emit every numeric value
that is not ``None``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from . import utils
from .model import DataType, DocumentType, Index, Property

__all__ = [
    "CompiledContract",
    "compile_contract",
    "compile_document_type",
    "compile_property",
    "compile_properties",
    "compile_index",
    "derive_required",
    "sync_required",
]

log = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# Required lists                                                              #
# --------------------------------------------------------------------------- #

def derive_required(properties: Iterable[Property]) -> list[str]:
    """Return the names of *properties* flagged as required, first seen first."""
    names: list[str] = []
    for prop in properties:
        if prop.required and prop.name not in names:
            names.append(prop.name)
    return names


def _sync_properties(properties: Sequence[Property]) -> None:
    for prop in properties:
        if prop.data_type is DataType.OBJECT:
            prop.required_properties = derive_required(prop.properties or ())
            _sync_properties(prop.properties or ())


def sync_required(document_types: Iterable[DocumentType]) -> None:
    """Refresh every derived ``required`` list from the current flags."""
    for doc_type in document_types:
        doc_type.required = derive_required(doc_type.properties)
        _sync_properties(doc_type.properties)

# --------------------------------------------------------------------------- #
# Field emission                                                              #
# --------------------------------------------------------------------------- #

def _put_text(out: dict[str, Any], key: str, value: Optional[str]) -> None:
    if value:
        out[key] = value


def _put_number(out: dict[str, Any], key: str, value: Optional[int], omit_zero: bool) -> None:
    if value is None or (omit_zero and value == 0):
        return
    out[key] = value

# --------------------------------------------------------------------------- #
# Properties                                                                  #
# --------------------------------------------------------------------------- #

def compile_property(prop: Property, *, omit_zero: bool = True) -> dict[str, Any]:
    """Return the property-schema object for *prop*.

    Only the constraint group of ``prop.data_type`` is emitted; fields of
    another group assigned after construction are left out.
    """
    out: dict[str, Any] = {"type": prop.data_type.schema_name}
    own = prop.constraints()
    _put_text(out, "description", prop.description)
    _put_number(out, "minLength", own.get("min_length"), omit_zero)
    _put_number(out, "maxLength", own.get("max_length"), omit_zero)
    _put_text(out, "pattern", own.get("pattern"))
    _put_text(out, "format", own.get("format"))
    _put_number(out, "minimum", own.get("minimum"), omit_zero)
    _put_number(out, "maximum", own.get("maximum"), omit_zero)
    if "byte_array" in own:
        out["byteArray"] = own["byte_array"]
    _put_number(out, "minItems", own.get("min_items"), omit_zero)
    _put_number(out, "maxItems", own.get("max_items"), omit_zero)

    if prop.data_type is DataType.OBJECT:
        children = prop.properties or []
        out["properties"] = compile_properties(children, omit_zero=omit_zero)
        _put_number(out, "minProperties", own.get("min_properties"), omit_zero)
        _put_number(out, "maxProperties", own.get("max_properties"), omit_zero)
        required = derive_required(children)
        if required:
            out["required"] = required
        out["additionalProperties"] = False

    _put_text(out, "$comment", prop.comment)
    return out


def compile_properties(properties: Iterable[Property], *, omit_zero: bool = True) -> dict[str, Any]:
    """Map property name -> property schema, in property order."""
    compiled: dict[str, Any] = {}
    for prop in properties:
        log.debug("compiling property %r (%s)", prop.name, prop.data_type.schema_name)
        compiled[prop.name] = compile_property(prop, omit_zero=omit_zero)
    return compiled

# --------------------------------------------------------------------------- #
# Indices                                                                     #
# --------------------------------------------------------------------------- #

def compile_index(index: Index) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": index.name,
        "properties": [{p.path: p.direction.value} for p in index.properties],
    }
    if index.unique:
        out["unique"] = True
    return out

# --------------------------------------------------------------------------- #
# Document types                                                              #
# --------------------------------------------------------------------------- #

def compile_document_type(doc_type: DocumentType, *, omit_zero: bool = True) -> dict[str, Any]:
    """Return the canonical object for one document type."""
    out: dict[str, Any] = {
        "type": "object",
        "properties": compile_properties(doc_type.properties, omit_zero=omit_zero),
    }
    if doc_type.indices:
        out["indices"] = [compile_index(i) for i in doc_type.indices]
    required = derive_required(doc_type.properties)
    if required:
        out["required"] = required
    out["additionalProperties"] = False
    if doc_type.comment:
        out["$comment"] = doc_type.comment
    return out


def _collect_required(
    path: tuple[str, ...],
    properties: Sequence[Property],
    into: dict[tuple[str, ...], list[str]],
) -> None:
    into[path] = derive_required(properties)
    for prop in properties:
        if prop.data_type is DataType.OBJECT:
            _collect_required(path + (prop.name,), prop.properties or (), into)


@dataclass
class CompiledContract:
    """Result of :func:`compile_contract`.

    ``fragments`` holds one ``(name, object)`` pair per document type in
    model order.  ``required`` holds the derived required list of every
    owner in the tree, keyed by its name path (``("note",)`` for a document
    type, ``("note", "address")`` for an Object property inside it).
    """

    fragments: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    required: dict[tuple[str, ...], list[str]] = field(default_factory=dict)

    @property
    def document(self) -> dict[str, Any]:
        """All fragments merged into one mapping (a later duplicate name wins)."""
        return {name: fragment for name, fragment in self.fragments}

    def to_json(self) -> str:
        """Compact canonical text; this is what the validator receives."""
        return json.dumps(self.document, separators=(",", ":"), ensure_ascii=False)

    def fragment_strings(self) -> list[str]:
        """``'"name":{...}'`` per document type, without the outer braces."""
        return [
            json.dumps({name: fragment}, separators=(",", ":"), ensure_ascii=False)[1:-1]
            for name, fragment in self.fragments
        ]

    def fingerprint(self) -> str:
        return utils._hash(self.document)


def compile_contract(
    document_types: Iterable[DocumentType], *, omit_zero: bool = True
) -> CompiledContract:
    """Compile *document_types* without modifying them.

    Use :func:`sync_required` (or :meth:`ContractSession.submit`) to write
    the derived required lists back into the model.
    """
    result = CompiledContract()
    for doc_type in document_types:
        log.debug("compiling document type %r", doc_type.name)
        result.fragments.append(
            (doc_type.name, compile_document_type(doc_type, omit_zero=omit_zero))
        )
        _collect_required((doc_type.name,), doc_type.properties, result.required)
    log.debug("compiled %d document type(s)", len(result.fragments))
    return result
