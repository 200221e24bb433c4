"""
errors.py - exception hierarchy shared by the compiler, importer and adapter.

Validation findings are *not* errors; they are returned as plain message
lists by :func:`contract_creator.validator.validate`.
"""

from __future__ import annotations

__all__ = [
    "ContractError",
    "ContractImportError",
    "MalformedContractError",
    "UnknownTypeError",
    "StructuralPreconditionError",
]


class ContractError(Exception):
    """Base class for every failure raised by this package."""


class ContractImportError(ContractError):
    """Raised when a serialized contract cannot be turned into a model."""


class MalformedContractError(ContractImportError, ValueError):
    """The contract text is not valid JSON or has the wrong shape."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class UnknownTypeError(ContractImportError, ValueError):
    """A ``type`` discriminator is not one of the supported data types."""

    def __init__(self, type_name: object, path: str = "") -> None:
        where = f" at '{path}'" if path else ""
        super().__init__(f"Unknown property type {type_name!r}{where}")
        self.type_name = type_name
        self.path = path


class StructuralPreconditionError(ContractError, RuntimeError):
    """Compiled output could not be materialised as a data contract."""
