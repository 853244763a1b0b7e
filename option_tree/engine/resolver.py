"""
Visibility resolution for option trees.

Walks the option graph depth-first (preorder) from the roots, pruning any
node whose visibility condition fails together with its entire subtree,
and following only child edges whose `when` condition holds.

Ordering is deterministic: roots in array order, children by target
sortOrder ascending, then target id compared case-insensitively (ties
broken by the raw id), so the output never depends on how the edges
happened to be declared.
"""

from dataclasses import dataclass, field

from option_tree.engine.conditions import Selected, evaluate_condition
from option_tree.schemas.option_tree import BranchEdge, OptionTree
from option_tree.schemas.selections import LineItemOptionSelections


@dataclass(frozen=True)
class ResolvedPath:
    """Result of one resolution."""

    visible_node_ids: list[str] = field(default_factory=list)
    # effectTags of the edges through which visible nodes were first reached
    path_tags: list[str] = field(default_factory=list)


def resolve_visible_nodes(
    tree: OptionTree, selections: LineItemOptionSelections | None
) -> list[str]:
    """
    Compute the ordered list of currently visible node ids.

    Never raises: blank root ids and dangling node references are skipped,
    and the visited set bounds the walk even on a graph that (invalidly)
    contains a cycle.

    Args:
        tree: Parsed option tree
        selections: Current selections for the line item (None means nothing selected)

    Returns:
        Visible node ids in preorder; a node reachable from several parents
        appears once, at its first-reached position.

    Example:
        >>> resolve_visible_nodes(tree, selections)
        ['Q1', 'Q2']
    """
    return resolve_visible_path(tree, selections).visible_node_ids


def resolve_visible_path(
    tree: OptionTree, selections: LineItemOptionSelections | None
) -> ResolvedPath:
    """
    Resolve visible nodes and the path tags collected along the way.

    Same traversal as `resolve_visible_nodes`. A tag is recorded when the
    edge carrying it is the one through which a visible node is first
    reached; tags are de-duplicated keeping first occurrence.
    """
    selected: Selected = selections.selected if selections is not None else {}
    visible: list[str] = []
    path_tags: list[str] = []
    visited: set[str] = set()

    # Explicit stack of (node_id, effect_tag of the edge that led here).
    # Children are pushed in reverse so they pop in sorted order, which keeps
    # the recursive preorder without being bounded by the interpreter stack.
    roots = tree.root_node_ids if isinstance(tree.root_node_ids, list) else []
    stack: list[tuple[str, str | None]] = [
        (root_id, None)
        for root_id in reversed(roots)
        if isinstance(root_id, str) and root_id.strip()
    ]

    while stack:
        node_id, effect_tag = stack.pop()
        if node_id in visited:
            continue
        visited.add(node_id)

        node = tree.nodes.get(node_id)
        if node is None:
            continue

        condition = node.visibility_condition
        if condition is not None and not evaluate_condition(condition, selected):
            continue

        visible.append(node_id)
        if effect_tag and effect_tag not in path_tags:
            path_tags.append(effect_tag)

        eligible = [
            edge
            for edge in node.children
            if edge.to_node_id and (edge.when is None or evaluate_condition(edge.when, selected))
        ]
        eligible.sort(key=lambda edge: _edge_sort_key(tree, edge))

        stack.extend((edge.to_node_id, edge.effect_tag) for edge in reversed(eligible))

    return ResolvedPath(visible_node_ids=visible, path_tags=path_tags)


def _edge_sort_key(tree: OptionTree, edge: BranchEdge) -> tuple[float, str, str]:
    """
    (target sortOrder, casefolded id, raw id); a dangling target sorts as order 0.

    Siblings "a" and "B" order as a, B; "B" and "b" fall back to code points.
    """
    target = tree.nodes.get(edge.to_node_id)
    sort_order = target.sort_order if target is not None else 0
    return (sort_order, edge.to_node_id.casefold(), edge.to_node_id)
