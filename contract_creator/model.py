"""
model.py - the editable, in-memory representation of a data contract.

A contract is an ordered list of :class:`DocumentType` objects.  Each one
owns an ordered list of :class:`Property` objects (Object properties own
their children in turn) and an ordered list of :class:`Index` objects.

The ``required`` lists on document types and Object properties are derived
from the children's ``required`` flags by
:func:`contract_creator.compiler.sync_required`; they take no part in
equality so two trees with the same flags compare equal whether or not they
have been synced.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from .errors import UnknownTypeError

__all__ = [
    "DataType",
    "SortDirection",
    "Property",
    "IndexProperty",
    "Index",
    "DocumentType",
    "CONSTRAINT_GROUPS",
    "new_document_type",
]

# --------------------------------------------------------------------------- #
# Enumerations                                                                #
# --------------------------------------------------------------------------- #

class DataType(enum.Enum):
    """Property data types; the value is the canonical schema name."""

    STRING = "string"
    INTEGER = "integer"
    ARRAY = "array"
    OBJECT = "object"
    NUMBER = "number"
    BOOLEAN = "boolean"

    @property
    def schema_name(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """Editor label, e.g. ``"Integer"``."""
        return self.value.capitalize()

    @classmethod
    def from_schema(cls, name: object, path: str = "") -> "DataType":
        if isinstance(name, str):
            for member in cls:
                if member.value == name:
                    return member
        raise UnknownTypeError(name, path)

    @classmethod
    def from_label(cls, label: str) -> "DataType":
        for member in cls:
            if member.label == label:
                return member
        raise UnknownTypeError(label)


class SortDirection(enum.Enum):
    ASC = "asc"
    DESC = "desc"


# Type-specific constraint fields.  Number and Boolean carry none.
CONSTRAINT_GROUPS: dict[DataType, tuple[str, ...]] = {
    DataType.STRING: ("min_length", "max_length", "pattern", "format"),
    DataType.INTEGER: ("minimum", "maximum"),
    DataType.ARRAY: ("byte_array", "min_items", "max_items"),
    DataType.OBJECT: ("properties", "min_properties", "max_properties"),
    DataType.NUMBER: (),
    DataType.BOOLEAN: (),
}

# --------------------------------------------------------------------------- #
# Properties                                                                  #
# --------------------------------------------------------------------------- #

@dataclass
class Property:
    """A named, typed field of a document type or of a nested object."""

    name: str = ""
    data_type: DataType = DataType.STRING
    required: bool = False
    description: Optional[str] = None
    comment: Optional[str] = None
    # String
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[str] = None
    # Integer
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    # Array
    byte_array: Optional[bool] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    # Object
    properties: Optional[list["Property"]] = None
    min_properties: Optional[int] = None
    max_properties: Optional[int] = None
    required_properties: Optional[list[str]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for data_type, names in CONSTRAINT_GROUPS.items():
            if data_type is self.data_type:
                continue
            stray = [n for n in names if getattr(self, n) is not None]
            if stray:
                raise ValueError(
                    f"Property '{self.name}' of type {self.data_type.label} "
                    f"cannot carry {data_type.label} constraints {stray}"
                )
        if self.data_type is DataType.OBJECT:
            if self.properties is None:
                self.properties = []
            if self.required_properties is None:
                self.required_properties = []
        elif self.required_properties is not None:
            raise ValueError(f"Property '{self.name}' is not an Object")

    def set_data_type(self, data_type: DataType) -> None:
        """Switch to *data_type*, clearing every type-specific constraint."""
        for names in CONSTRAINT_GROUPS.values():
            for name in names:
                setattr(self, name, None)
        self.required_properties = None
        self.data_type = data_type
        if data_type is DataType.OBJECT:
            self.properties = []
            self.required_properties = []

    def constraints(self) -> dict[str, object]:
        """Return the populated constraint fields of the current type."""
        return {
            name: getattr(self, name)
            for name in CONSTRAINT_GROUPS[self.data_type]
            if name != "properties" and getattr(self, name) is not None
        }

# --------------------------------------------------------------------------- #
# Indices                                                                     #
# --------------------------------------------------------------------------- #

@dataclass
class IndexProperty:
    """One ``(propertyPath, sortDirection)`` pair of an index."""

    path: str = ""
    direction: SortDirection = SortDirection.ASC


@dataclass
class Index:
    name: str = ""
    properties: list[IndexProperty] = field(default_factory=lambda: [IndexProperty()])
    unique: bool = False

# --------------------------------------------------------------------------- #
# Document types                                                              #
# --------------------------------------------------------------------------- #

@dataclass
class DocumentType:
    name: str = ""
    properties: list[Property] = field(default_factory=list)
    indices: list[Index] = field(default_factory=list)
    required: list[str] = field(default_factory=list, compare=False)
    comment: str = ""


def new_document_type(name: str = "") -> DocumentType:
    """A document type as the editor creates it: one blank String property."""
    return DocumentType(name=name, properties=[Property()])
