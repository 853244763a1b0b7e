"""
LineItemOptionSelections (schemaVersion=2) document models.

One document per order/quote line item. `selected` is the only part the
evaluator and resolver read; `resolved` is a display cache that goes stale
the moment selections or the tree change.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from option_tree.schemas.common import DocumentModel, validate_document


class SelectionEntry(DocumentModel):
    value: Any = None
    note: str | None = None


class ResolvedCache(DocumentModel):
    visible_node_ids: list[str] | None = None
    path_tags: list[str] | None = None
    # Fingerprint of the tree the cache was computed against
    tree_fingerprint: str | None = None


class LineItemOptionSelections(DocumentModel):
    schema_version: Literal[2]
    selected: dict[str, SelectionEntry] = Field(default_factory=dict)
    resolved: ResolvedCache | None = None


def parse_selections(doc: Any) -> LineItemOptionSelections:
    """
    Parse a LineItemOptionSelections document.

    Raises:
        DocumentSchemaError: If the document shape is invalid
    """
    return validate_document(LineItemOptionSelections, doc, "LineItemOptionSelections")
