"""
Services package for the option tree engine.

Contains the document-level operations host services call: evaluation of
raw documents, maintenance of the resolved cache, and initialization of
v2 trees from legacy option lists.
"""

from option_tree.services.evaluation import check_option_tree, evaluate_option_selections
from option_tree.services.legacy_options import build_option_tree_from_legacy_options
from option_tree.services.resolved_cache import is_resolved_cache_current, refresh_resolved_cache

__all__ = [
    "build_option_tree_from_legacy_options",
    "check_option_tree",
    "evaluate_option_selections",
    "is_resolved_cache_current",
    "refresh_resolved_cache",
]
