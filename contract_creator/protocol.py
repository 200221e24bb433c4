"""
protocol.py - protocol-conformance checks for data contracts
============================================================

This module plays the part of the platform's contract library: it wraps a
set of document types in a data-contract envelope and reports every way in
which that contract breaks the protocol rules.  Callers treat it as a black
box: hand in ``(owner id, documents, protocol version)``, receive a list of
:class:`Violation` records.

Public API
----------
Identifier                       32-byte identifier (``Identifier.random()``)
Violation / ValidationResult     structured findings
ProtocolVersionValidator         version policy
DataContractValidator            meta-schema + index rule checks
DataContractFactory              builds :class:`DataContract` objects
DataContractCreateError          raised when a contract cannot be built

Rule sets
---------
1. protocol version (``UnsupportedProtocolVersionError``,
   ``IncompatibleProtocolVersionError``)
2. data-contract meta-schema, paths absolute within the contract
3. document meta-schema, run once per document type with paths relative to
   that document type
4. index rules, only once 1-3 are clean
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from jsonschema import Draft7Validator, FormatChecker

from . import loader
from . import utils
from .parser import json_pointer

__all__ = [
    "PROTOCOL_VERSION",
    "SCHEMA_URI",
    "JSON_SCHEMA_ERROR",
    "Identifier",
    "Violation",
    "ValidationResult",
    "ProtocolVersionValidator",
    "DataContractValidator",
    "DataContract",
    "DataContractFactory",
    "DataContractCreateError",
]

PROTOCOL_VERSION = 1
SCHEMA_URI = "contract-creator://meta/data-contract"

JSON_SCHEMA_ERROR = "JsonSchemaError"

MAX_INDEXED_STRING_LENGTH = 63
UNIQUE_INDICES_LIMIT = 3
SYSTEM_PROPERTIES = frozenset({"$id", "$ownerId", "$createdAt", "$updatedAt"})

# --------------------------------------------------------------------------- #
# Values                                                                      #
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class Identifier:
    buffer: bytes

    def __post_init__(self) -> None:
        if len(self.buffer) != 32:
            raise ValueError(f"Identifier must be 32 bytes, got {len(self.buffer)}")

    @classmethod
    def random(cls) -> "Identifier":
        return cls(secrets.token_bytes(32))

    def __str__(self) -> str:
        return self.buffer.hex()


@dataclass(frozen=True)
class Violation:
    """One protocol finding.

    ``schema_path`` tells apart findings that share category, summary and
    instance path but were raised by different rules.
    """

    category: str
    summary: str
    instance_path: str = ""
    schema_path: tuple = ()

    def __str__(self) -> str:
        return self.summary


@dataclass
class ValidationResult:
    errors: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)


class DataContractCreateError(ValueError):
    """Raised when raw documents cannot be wrapped into a data contract."""

# --------------------------------------------------------------------------- #
# Version policy                                                              #
# --------------------------------------------------------------------------- #

class ProtocolVersionValidator:
    """Accepts versions in ``1..latest_version`` that *current_version* can read.

    ``compatibility_map`` maps a current version to the oldest version it can
    still read; versions missing from the map are only compatible with
    themselves and newer ones.
    """

    def __init__(
        self,
        current_version: int = PROTOCOL_VERSION,
        latest_version: int = PROTOCOL_VERSION,
        compatibility_map: Optional[Mapping[int, int]] = None,
    ) -> None:
        self.current_version = current_version
        self.latest_version = latest_version
        self.compatibility_map = dict(compatibility_map or {})

    def validate(self, version: Any) -> ValidationResult:
        result = ValidationResult()
        if isinstance(version, bool) or not isinstance(version, int):
            return result  # left to the meta-schema
        if version < 1 or version > self.latest_version:
            result.errors.append(Violation(
                "UnsupportedProtocolVersionError",
                f"Protocol version {version} is not supported. "
                f"Latest supported version is {self.latest_version}",
                "/protocolVersion",
            ))
            return result
        minimal = self.compatibility_map.get(self.current_version, self.current_version)
        if version < minimal:
            result.errors.append(Violation(
                "IncompatibleProtocolVersionError",
                f"Protocol version {version} is not compatible with current "
                f"version {self.current_version}. Minimal compatible version is {minimal}",
                "/protocolVersion",
            ))
        return result

# --------------------------------------------------------------------------- #
# Contract validation                                                         #
# --------------------------------------------------------------------------- #

def _schema_violations(validator: Draft7Validator, instance: Any) -> list[Violation]:
    return [
        Violation(
            JSON_SCHEMA_ERROR,
            err.message,
            json_pointer(*err.absolute_path),
            tuple(err.absolute_schema_path),
        )
        for err in validator.iter_errors(instance)
    ]


def _resolve(schema: Mapping[str, Any], path: str) -> Optional[Mapping[str, Any]]:
    """Follow a dotted index path through nested ``properties``."""
    current: Any = schema
    for part in path.split("."):
        props = current.get("properties") if isinstance(current, Mapping) else None
        if not isinstance(props, Mapping) or part not in props:
            return None
        current = props[part]
    return current if isinstance(current, Mapping) else None


class DataContractValidator:
    """Runs every rule set against a cleaned data-contract object."""

    def __init__(self, protocol_version_validator: ProtocolVersionValidator) -> None:
        self.protocol_version_validator = protocol_version_validator
        checker = FormatChecker()
        self._contract = Draft7Validator(
            loader.load_schema(loader.DATA_CONTRACT_META_SCHEMA), format_checker=checker
        )
        self._document = Draft7Validator(
            loader.load_schema(loader.DOCUMENT_META_SCHEMA), format_checker=checker
        )

    def validate(self, raw: Mapping[str, Any]) -> ValidationResult:
        result = self.protocol_version_validator.validate(raw.get("protocolVersion"))
        result.errors.extend(_schema_violations(self._contract, raw))
        if not result.is_valid:
            return result

        documents: Mapping[str, Any] = raw["documents"]
        for document_schema in documents.values():
            result.errors.extend(_schema_violations(self._document, document_schema))
        if not result.is_valid:
            return result

        for name, document_schema in documents.items():
            result.merge(self.validate_indices(name, document_schema))
        return result

    def validate_indices(self, document_type: str, schema: Mapping[str, Any]) -> ValidationResult:
        result = ValidationResult()
        indices = schema.get("indices", [])
        seen: set[str] = set()
        unique_count = 0

        for position, index in enumerate(indices):
            where = f"/indices/{position}"
            if index["name"] in seen:
                result.errors.append(Violation(
                    "DuplicateIndexNameError",
                    f"Duplicate index name '{index['name']}' in '{document_type}' document",
                    where,
                ))
            seen.add(index["name"])

            if index.get("unique"):
                unique_count += 1
                if unique_count == UNIQUE_INDICES_LIMIT + 1:
                    result.errors.append(Violation(
                        "UniqueIndicesLimitReachedError",
                        f"'{document_type}' document has more than "
                        f"{UNIQUE_INDICES_LIMIT} unique indexes",
                        where,
                    ))

            for entry in index["properties"]:
                for path in entry:
                    result.errors.extend(self._check_indexed_property(document_type, schema, path, where))
        return result

    def _check_indexed_property(
        self, document_type: str, schema: Mapping[str, Any], path: str, where: str
    ) -> list[Violation]:
        if path in SYSTEM_PROPERTIES:
            return []
        target = _resolve(schema, path)
        if target is None:
            return [Violation(
                "UndefinedIndexPropertyError",
                f"'{path}' property is not defined in the '{document_type}' document",
                where,
            )]
        kind = target.get("type")
        if kind == "object" or (kind == "array" and not target.get("byteArray")):
            return [Violation(
                "InvalidIndexPropertyTypeError",
                f"'{path}' property of '{document_type}' document has an invalid "
                f"type '{kind}' and cannot be used as an index",
                where,
            )]
        if kind == "string":
            max_length = target.get("maxLength")
            if max_length is None or max_length > MAX_INDEXED_STRING_LENGTH:
                return [Violation(
                    "InvalidIndexedPropertyConstraintError",
                    f"Indexed property '{path}' of '{document_type}' document has an "
                    f"invalid constraint 'maxLength', reason: should be less or equal "
                    f"than {MAX_INDEXED_STRING_LENGTH}",
                    where,
                )]
        return []

# --------------------------------------------------------------------------- #
# Contracts                                                                   #
# --------------------------------------------------------------------------- #

@dataclass
class DataContract:
    id: Identifier
    owner_id: Identifier
    protocol_version: int
    documents: dict[str, Any]
    validator: DataContractValidator = field(repr=False, compare=False)
    version: int = 1
    schema: str = SCHEMA_URI

    def to_cleaned_object(self) -> dict[str, Any]:
        """Plain, JSON-compatible representation."""
        return {
            "protocolVersion": self.protocol_version,
            "$schema": self.schema,
            "$id": str(self.id),
            "version": self.version,
            "ownerId": str(self.owner_id),
            "documents": utils._json_safe(self.documents),
        }

    def validate(self, raw: Mapping[str, Any]) -> ValidationResult:
        return self.validator.validate(raw)


class DataContractFactory:
    def __init__(self, protocol_version: int, validator: DataContractValidator) -> None:
        self.protocol_version = protocol_version
        self.validator = validator

    def create(
        self,
        owner_id: Identifier,
        documents: Mapping[str, Any],
        *,
        entropy: Optional[bytes] = None,
    ) -> DataContract:
        if not isinstance(documents, Mapping):
            raise DataContractCreateError(
                f"documents must be a mapping, got {type(documents).__name__}"
            )
        for name, document in documents.items():
            if not isinstance(document, Mapping):
                raise DataContractCreateError(f"document type '{name}' must be a mapping")

        entropy = entropy if entropy is not None else secrets.token_bytes(32)
        contract_id = Identifier(utils._sha256d(owner_id.buffer + entropy))
        return DataContract(
            id=contract_id,
            owner_id=owner_id,
            protocol_version=self.protocol_version,
            documents={name: dict(document) for name, document in documents.items()},
            validator=self.validator,
        )
