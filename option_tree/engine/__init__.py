"""
Option tree engine.

Three pure, stateless components, evaluated bottom-up:
- conditions: evaluates a condition expression against current selections
- resolver: walks the option graph and returns the ordered visible node ids
- validator: verifies a tree is well-formed (no dangling edges, no cycles)

Plus canonicalizer, which produces deterministic JSON and tree fingerprints.

Design Principles:
- Fail-closed: ambiguity in a condition resolves to "hidden"
- Determinism: the same (tree, selections) always resolves to the same list
- Completeness: validation reports every violation, not just the first
"""

from option_tree.engine.canonicalizer import canonicalize_json, tree_fingerprint
from option_tree.engine.conditions import evaluate_condition
from option_tree.engine.resolver import ResolvedPath, resolve_visible_nodes, resolve_visible_path
from option_tree.engine.validator import TreeValidationResult, validate_option_tree_v2

__all__ = [
    "ResolvedPath",
    "TreeValidationResult",
    "canonicalize_json",
    "evaluate_condition",
    "resolve_visible_nodes",
    "resolve_visible_path",
    "tree_fingerprint",
    "validate_option_tree_v2",
]
