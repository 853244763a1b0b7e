"""
Structural validation for option trees.

Checks that a tree document is well-formed before it is trusted by the
resolver or an authoring UI:
- schemaVersion is 2
- rootNodeIds is a non-empty list of ids present in nodes
- every node's id equals its key in nodes
- every edge target exists in nodes
- the graph reachable from the roots has no cycle

Unlike the document parser, validation never raises and never stops at the
first problem: every violation is collected so an editor can report all of
them from a single save.

Condition refs are not checked against node ids; a condition may name a
ref that is never populated and still pass.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from option_tree.core.errors import OptionTreeInvalidError
from option_tree.schemas.option_tree import OptionTree

SCHEMA_VERSION = 2


@dataclass(frozen=True)
class TreeValidationResult:
    """Outcome of a validation; `ok` iff no errors were collected."""

    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """
        Raise if the tree is invalid.

        Raises:
            OptionTreeInvalidError: With the full error list in details["errors"]
        """
        if self.errors:
            raise OptionTreeInvalidError(
                f"Option tree failed structural validation ({len(self.errors)} error(s))",
                details={"errors": list(self.errors)},
            )

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "errors": list(self.errors)}


def validate_option_tree_v2(tree: OptionTree | Mapping[str, Any] | Any) -> TreeValidationResult:
    """
    Validate the structure of an option tree.

    Args:
        tree: Parsed OptionTree, or the raw JSON document (any shape)

    Returns:
        TreeValidationResult listing every violation found

    Example:
        >>> doc = {"schemaVersion": 2, "rootNodeIds": ["A"], "nodes": {"A": {"id": "A"}}}
        >>> validate_option_tree_v2(doc).ok
        True
    """
    if isinstance(tree, OptionTree):
        tree = tree.to_document()

    if not isinstance(tree, Mapping):
        return TreeValidationResult(errors=("Tree must be an object",))

    errors: list[str] = []

    if tree.get("schemaVersion") != SCHEMA_VERSION:
        errors.append(f"schemaVersion must be {SCHEMA_VERSION}")

    roots = tree.get("rootNodeIds")
    if not isinstance(roots, list) or len(roots) == 0:
        errors.append("rootNodeIds must be a non-empty array")
        roots = roots if isinstance(roots, list) else []

    nodes = tree.get("nodes")
    if not isinstance(nodes, Mapping):
        errors.append("nodes must be an object map")
        return TreeValidationResult(errors=tuple(errors))

    _check_node_ids(nodes, errors)
    _check_roots(roots, nodes, errors)
    _check_edges(nodes, errors)
    _check_cycles(roots, nodes, errors)

    return TreeValidationResult(errors=tuple(errors))


def _check_node_ids(nodes: Mapping[str, Any], errors: list[str]) -> None:
    for key, node in nodes.items():
        if not isinstance(node, Mapping):
            errors.append(f"nodes['{key}'] must be an object")
            continue
        if node.get("id") != key:
            errors.append(f"Node id mismatch: nodes['{key}'].id must equal '{key}'")


def _check_roots(roots: list[Any], nodes: Mapping[str, Any], errors: list[str]) -> None:
    for root_id in roots:
        if not _is_id(root_id):
            errors.append("rootNodeIds must contain non-empty strings")
            continue
        if root_id not in nodes:
            errors.append(f"rootNodeId '{root_id}' does not exist in nodes")


def _check_edges(nodes: Mapping[str, Any], errors: list[str]) -> None:
    for from_id, node in nodes.items():
        if not isinstance(node, Mapping):
            continue
        edges = node.get("edges")
        children = edges.get("children") if isinstance(edges, Mapping) else None
        if children is None:
            continue
        if not isinstance(children, list):
            errors.append(f"nodes['{from_id}'].edges.children must be an array if present")
            continue

        for idx, edge in enumerate(children):
            to_node_id = edge.get("toNodeId") if isinstance(edge, Mapping) else None
            if not _is_id(to_node_id):
                errors.append(
                    f"nodes['{from_id}'].edges.children[{idx}].toNodeId must be a string"
                )
                continue
            if to_node_id not in nodes:
                errors.append(f"Edge reference missing: '{from_id}' -> '{to_node_id}'")


def _check_cycles(roots: list[Any], nodes: Mapping[str, Any], errors: list[str]) -> None:
    """
    Depth-first search from each existing root.

    `on_stack` holds the current path; `visited` holds every node whose
    subtree has been entered. Reaching a node that is on the current path is
    a cycle; reaching one that is merely visited is a shared descendant
    (a diamond) and is fine.
    """
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root_id in roots:
        if not _is_id(root_id) or root_id not in nodes or root_id in visited:
            continue

        visited.add(root_id)
        on_stack.add(root_id)
        # Frames of (node_id, iterator over its existing child ids)
        frames = [(root_id, _child_ids(nodes, root_id))]

        while frames:
            node_id, pending = frames[-1]
            child_id = next(pending, None)
            if child_id is None:
                frames.pop()
                on_stack.discard(node_id)
                continue
            if child_id in on_stack:
                errors.append(f"Cycle detected at '{child_id}'")
                continue
            if child_id in visited:
                continue
            visited.add(child_id)
            on_stack.add(child_id)
            frames.append((child_id, _child_ids(nodes, child_id)))


def _child_ids(nodes: Mapping[str, Any], node_id: str) -> Iterator[str]:
    """Edge targets of `node_id` that exist in nodes, in declared order."""
    node = nodes.get(node_id)
    edges = node.get("edges") if isinstance(node, Mapping) else None
    children = edges.get("children") if isinstance(edges, Mapping) else None
    if not isinstance(children, list):
        return iter(())
    targets = [edge.get("toNodeId") for edge in children if isinstance(edge, Mapping)]
    return iter([to_id for to_id in targets if _is_id(to_id) and to_id in nodes])


def _is_id(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
