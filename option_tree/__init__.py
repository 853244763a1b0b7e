"""
Option tree engine for configurable print products.

Evaluates branching option trees (schemaVersion 2) against a line item's
selections: which questions are visible, in what order, and whether a
tree document is structurally sound.

Usage:
    from option_tree import evaluate_condition, resolve_visible_nodes, validate_option_tree_v2
"""

from option_tree.engine.conditions import evaluate_condition
from option_tree.engine.resolver import resolve_visible_nodes
from option_tree.engine.validator import validate_option_tree_v2

__all__ = [
    "evaluate_condition",
    "resolve_visible_nodes",
    "validate_option_tree_v2",
]
