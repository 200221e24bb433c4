"""
contract_creator – build, compile, import and validate data contracts.
"""
import logging

from .model import DataType, SortDirection, Property, IndexProperty, Index, DocumentType, new_document_type
from .compiler import CompiledContract, compile_contract, derive_required, sync_required
from .importer import import_contract
from .validator import validate
from .contract import ContractSession
from .card import to_markdown_card, properties_frame
from .errors import (
    ContractError,
    ContractImportError,
    MalformedContractError,
    UnknownTypeError,
    StructuralPreconditionError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DataType",
    "SortDirection",
    "Property",
    "IndexProperty",
    "Index",
    "DocumentType",
    "new_document_type",
    "CompiledContract",
    "compile_contract",
    "derive_required",
    "sync_required",
    "import_contract",
    "validate",
    "ContractSession",
    "to_markdown_card",
    "properties_frame",
    "ContractError",
    "ContractImportError",
    "MalformedContractError",
    "UnknownTypeError",
    "StructuralPreconditionError",
]
