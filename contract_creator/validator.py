"""
validator.py - run compiled contracts through the protocol checks
=================================================================

Public API
----------
validate(canonical_document, *, protocol_version=PROTOCOL_VERSION) -> list[str]
    Wrap the compiled document types in a data contract owned by a freshly
    generated identifier, validate it, and return one human-readable line
    per distinct finding.  An empty list means the contract passed.

format_violation(violation) -> str
extract_messages(violations) -> list[str]
    The formatting / de-duplication steps, usable on their own.

Failures
--------
Findings are data and never raise.  Two situations are fatal because they
mean the compiler's output contract was broken upstream:

* :class:`MalformedContractError` - *canonical_document* is not a JSON object.
* :class:`StructuralPreconditionError` - the data contract could not be built.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from . import protocol
from .errors import StructuralPreconditionError
from .parser import parse_document

__all__ = ["validate", "format_violation", "extract_messages"]

log = logging.getLogger(__name__)


def format_violation(violation: protocol.Violation) -> str:
    if violation.category == protocol.JSON_SCHEMA_ERROR:
        return f"{violation.category}: {violation.summary}, Path: {violation.instance_path}"
    return str(violation)


def extract_messages(violations: Iterable[protocol.Violation]) -> list[str]:
    """Format *violations*, keeping each distinct message once (first seen first)."""
    return list(dict.fromkeys(format_violation(v) for v in violations))


def validate(
    canonical_document: str | bytes | Mapping[str, Any],
    *,
    protocol_version: int = protocol.PROTOCOL_VERSION,
) -> list[str]:
    documents = parse_document(canonical_document)

    version_validator = protocol.ProtocolVersionValidator()
    contract_validator = protocol.DataContractValidator(version_validator)
    factory = protocol.DataContractFactory(protocol_version, contract_validator)
    owner_id = protocol.Identifier.random()

    try:
        contract = factory.create(owner_id, documents)
    except protocol.DataContractCreateError as exc:
        raise StructuralPreconditionError(
            f"Compiled document could not be turned into a data contract: {exc}"
        ) from exc

    result = contract.validate(contract.to_cleaned_object())
    messages = extract_messages(result.errors)
    if messages:
        log.warning(
            "contract %s: %d finding(s) (%d distinct)",
            contract.id, len(result.errors), len(messages),
        )
    else:
        log.debug("contract %s passed validation", contract.id)
    return messages
