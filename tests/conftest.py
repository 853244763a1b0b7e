"""
Pytest configuration and shared fixtures for option tree tests.

Provides:
- AnyIO backend selection
- Document factories for trees, nodes and selections
- The two-question branching tree used by end-to-end tests
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]

# Add package to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402 (import after path setup)

from option_tree.schemas.option_tree import OptionTree, parse_option_tree  # noqa: E402
from option_tree.schemas.selections import (  # noqa: E402
    LineItemOptionSelections,
    parse_selections,
)

# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Document Factories
# =============================================================================


def _node(
    node_id: str,
    *children: str | dict[str, Any],
    condition: dict[str, Any] | None = None,
    sort_order: float | None = None,
    kind: str = "question",
) -> dict[str, Any]:
    node: dict[str, Any] = {"id": node_id, "kind": kind, "label": node_id}
    if sort_order is not None:
        node["ui"] = {"sortOrder": sort_order}
    if condition is not None:
        node["visibility"] = {"condition": condition}
    if children:
        node["edges"] = {
            "children": [
                {"toNodeId": child} if isinstance(child, str) else child for child in children
            ]
        }
    return node


def _tree_doc(roots: list[str], *nodes: dict[str, Any]) -> dict[str, Any]:
    return {
        "schemaVersion": 2,
        "rootNodeIds": roots,
        "nodes": {node["id"]: node for node in nodes},
    }


@pytest.fixture
def make_node() -> Callable[..., dict[str, Any]]:
    """Factory for node documents: make_node("A", "B", {"toNodeId": "C", ...})."""
    return _node


@pytest.fixture
def make_tree_doc() -> Callable[..., dict[str, Any]]:
    """Factory for tree documents: make_tree_doc(["A"], node_a, node_b)."""
    return _tree_doc


@pytest.fixture
def make_tree() -> Callable[..., OptionTree]:
    """Factory for parsed trees."""

    def _make(roots: list[str], *nodes: dict[str, Any]) -> OptionTree:
        return parse_option_tree(_tree_doc(roots, *nodes))

    return _make


@pytest.fixture
def make_selections() -> Callable[..., LineItemOptionSelections]:
    """Factory for parsed selections: make_selections(Q1="yes", finishing=["grommets"])."""

    def _make(**values: Any) -> LineItemOptionSelections:
        return parse_selections(
            {
                "schemaVersion": 2,
                "selected": {ref: {"value": value} for ref, value in values.items()},
            }
        )

    return _make


@pytest.fixture
def branching_tree_doc() -> dict[str, Any]:
    """Q1 always shows; Q2 shows only when Q1 == "yes"."""
    return _tree_doc(
        ["Q1"],
        _node("Q1", {"toNodeId": "Q2", "when": {"op": "equals", "ref": "Q1", "value": "yes"}}),
        _node("Q2"),
    )


@pytest.fixture
def branching_tree(branching_tree_doc: dict[str, Any]) -> OptionTree:
    return parse_option_tree(branching_tree_doc)
