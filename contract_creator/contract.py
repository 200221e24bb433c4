"""
contract.py - High-level editing session for a data contract.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence, Union

from . import protocol
from . import validator
from .compiler import CompiledContract, compile_contract, derive_required, sync_required
from .importer import import_contract
from .model import (
    DataType,
    DocumentType,
    Index,
    IndexProperty,
    Property,
    new_document_type,
)
from .parser import parse_document

__all__ = ["ContractSession"]

log = logging.getLogger(__name__)

PropertyPath = Sequence[int]


class ContractSession:
    """The editable state behind the contract editor.

    Document types, properties and indices are addressed by position.  A
    property is addressed by a *path*: the position of a top-level property
    followed by the positions of nested children, e.g. ``(2, 0)`` is the
    first child of the third property.
    """

    def __init__(self, *, omit_zero: bool = True, protocol_version: int = protocol.PROTOCOL_VERSION):
        self.omit_zero = omit_zero
        self.protocol_version = protocol_version
        self.document_types: list[DocumentType] = [new_document_type()]
        self.json_object: list[str] = []
        self.imported_json = ""
        self.error_messages: list[str] = []

    # ------------------------------------------------------------------ #
    # Lookup                                                             #
    # ------------------------------------------------------------------ #
    def property_at(self, doc_index: int, path: PropertyPath) -> Property:
        if not path:
            raise ValueError("A property path needs at least one position")
        prop = self.document_types[doc_index].properties[path[0]]
        for position in path[1:]:
            prop = self._children(prop)[position]
        return prop

    @staticmethod
    def _children(prop: Property) -> list[Property]:
        if prop.data_type is not DataType.OBJECT or prop.properties is None:
            raise ValueError(f"Property '{prop.name}' is not an Object")
        return prop.properties

    # ------------------------------------------------------------------ #
    # Document types                                                     #
    # ------------------------------------------------------------------ #
    def add_document_type(self, name: str = "") -> DocumentType:
        doc_type = new_document_type(name)
        self.document_types.append(doc_type)
        return doc_type

    def remove_document_type(self, doc_index: int) -> DocumentType:
        return self.document_types.pop(doc_index)

    # ------------------------------------------------------------------ #
    # Properties                                                         #
    # ------------------------------------------------------------------ #
    def add_property(self, doc_index: int, prop: Optional[Property] = None) -> Property:
        prop = prop if prop is not None else Property()
        self.document_types[doc_index].properties.append(prop)
        return prop

    def remove_property(self, doc_index: int, prop_index: int) -> Property:
        doc_type = self.document_types[doc_index]
        removed = doc_type.properties.pop(prop_index)
        doc_type.required = derive_required(doc_type.properties)
        return removed

    def add_nested_property(
        self, doc_index: int, path: PropertyPath, prop: Optional[Property] = None
    ) -> Property:
        """Append a child to the Object property at *path*."""
        prop = prop if prop is not None else Property()
        self._children(self.property_at(doc_index, path)).append(prop)
        return prop

    def remove_nested_property(self, doc_index: int, path: PropertyPath, child_index: int) -> Property:
        parent = self.property_at(doc_index, path)
        children = self._children(parent)
        removed = children.pop(child_index)
        parent.required_properties = derive_required(children)
        return removed

    def set_property_type(
        self, doc_index: int, path: PropertyPath, data_type: Union[DataType, str]
    ) -> Property:
        """Change a property's type; accepts a :class:`DataType` or an editor label."""
        if not isinstance(data_type, DataType):
            data_type = DataType.from_label(data_type)
        prop = self.property_at(doc_index, path)
        prop.set_data_type(data_type)
        return prop

    # ------------------------------------------------------------------ #
    # Indices                                                            #
    # ------------------------------------------------------------------ #
    def add_index(self, doc_index: int) -> Index:
        index = Index()
        self.document_types[doc_index].indices.append(index)
        return index

    def remove_index(self, doc_index: int, index_index: int) -> Index:
        return self.document_types[doc_index].indices.pop(index_index)

    def add_index_property(self, doc_index: int, index_index: int) -> IndexProperty:
        entry = IndexProperty()
        self.document_types[doc_index].indices[index_index].properties.append(entry)
        return entry

    # ------------------------------------------------------------------ #
    # Compile / validate / import                                        #
    # ------------------------------------------------------------------ #
    def compile(self) -> CompiledContract:
        """Compile the model and refresh its derived required lists."""
        compiled = compile_contract(self.document_types, omit_zero=self.omit_zero)
        sync_required(self.document_types)
        return compiled

    @property
    def canonical_document(self) -> str:
        return "{" + ",".join(self.json_object) + "}"

    def submit(self) -> list[str]:
        """Compile, validate, and keep both results on the session."""
        compiled = self.compile()
        self.json_object = compiled.fragment_strings()
        self.error_messages = validator.validate(
            compiled.to_json(), protocol_version=self.protocol_version
        )
        self.imported_json = ""
        log.info(
            "submitted %d document type(s): %d finding(s)",
            len(self.document_types), len(self.error_messages),
        )
        return self.error_messages

    def import_json(self, text: Optional[str] = None) -> list[DocumentType]:
        """Replace every document type with those described by *text*.

        Falls back to :attr:`imported_json` when *text* is omitted.  On error
        the session is left untouched and the typed exception propagates.
        """
        raw = parse_document(self.imported_json if text is None else text)
        document_types = import_contract(raw)

        self.document_types = document_types
        self.json_object = [
            json.dumps({name: value}, separators=(",", ":"), ensure_ascii=False)[1:-1]
            for name, value in raw.items()
        ]
        if text is not None:
            self.imported_json = text
        log.info("imported %d document type(s)", len(document_types))
        return document_types

    def clear(self) -> None:
        """Drop the displayed JSON and any pending import text; the model stays."""
        self.json_object = []
        self.imported_json = ""
        log.info("cleared contract output")
