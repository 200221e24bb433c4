# contract_creator/card.py
from __future__ import annotations
from typing import Any, Iterable, Iterator

import pandas as pd

from .model import CONSTRAINT_GROUPS, DataType, DocumentType, Property

__all__ = ["to_markdown_card", "properties_frame"]

# every constraint column, in group order
_CONSTRAINT_COLUMNS: list[str] = [
    name for names in CONSTRAINT_GROUPS.values() for name in names if name != "properties"
]

def _format_scalar(v: Any) -> str:
    """Return a Markdown-safe scalar string."""
    if v is True:   return "true"
    if v is False:  return "false"
    if v is None:   return "null"
    return str(v)

def _walk(properties: Iterable[Property], prefix: str = "") -> Iterator[tuple[str, Property]]:
    """Yield ``(dotted path, property)`` depth-first, parents before children."""
    for prop in properties:
        path = f"{prefix}{prop.name}"
        yield path, prop
        if prop.data_type is DataType.OBJECT:
            yield from _walk(prop.properties or (), f"{path}.")

def _property_line(path: str, prop: Property) -> str:
    parts = [f"- **{path}**: {prop.data_type.schema_name}"]
    if prop.required:
        parts.append("(required)")
    constraints = ", ".join(f"{k}={_format_scalar(v)}" for k, v in prop.constraints().items())
    if constraints:
        parts.append(f"[{constraints}]")
    if prop.description:
        parts.append(f"- {prop.description}")
    return " ".join(parts)

def to_markdown_card(document_type: DocumentType, *, heading_level: int = 2) -> str:
    """
    Convert *document_type* into a Markdown card.

    Parameters
    ----------
    document_type : DocumentType
        The document type to summarise; nested properties are listed with
        dotted paths.
    heading_level : int, default 2
        Markdown heading level for the document type name (##, ###, …).
        Sections use one level more.

    Returns
    -------
    str
        Markdown document.
    """
    h = "#" * heading_level
    sub = "#" * (heading_level + 1)
    parts: list[str] = [f"{h} {document_type.name or '(unnamed)'}"]
    if document_type.comment:
        parts.append(document_type.comment)
    parts.append("")

    parts.append(f"{sub} Properties")
    parts.extend(_property_line(path, prop) for path, prop in _walk(document_type.properties))
    parts.append("")

    if document_type.indices:
        parts.append(f"{sub} Indices")
        for index in document_type.indices:
            fields = ", ".join(f"{p.path} {p.direction.value}" for p in index.properties)
            unique = " (unique)" if index.unique else ""
            parts.append(f"- **{index.name}**{unique}: {fields}")
        parts.append("")
    return "\n".join(parts).rstrip()

def properties_frame(document_types: Iterable[DocumentType]) -> pd.DataFrame:
    """One row per property (nested ones included) across *document_types*."""
    rows: list[dict[str, Any]] = []
    for doc_type in document_types:
        for path, prop in _walk(doc_type.properties):
            row: dict[str, Any] = {
                "document_type": doc_type.name,
                "path": path,
                "type": prop.data_type.schema_name,
                "required": prop.required,
                "description": prop.description,
            }
            row.update({name: getattr(prop, name) for name in _CONSTRAINT_COLUMNS})
            rows.append(row)
    columns = ["document_type", "path", "type", "required", "description", *_CONSTRAINT_COLUMNS]
    return pd.DataFrame(rows, columns=columns)
