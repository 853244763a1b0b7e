"""
The `resolved` display cache on LineItemOptionSelections.

The cache is a hint for list views that cannot afford to resolve every line
item. It is never a source of truth: it is stamped with the fingerprint of
the tree it was computed against and is considered current only when a
fresh resolution agrees with it.
"""

from option_tree.engine.canonicalizer import tree_fingerprint
from option_tree.engine.resolver import resolve_visible_path
from option_tree.schemas.option_tree import OptionTree
from option_tree.schemas.selections import LineItemOptionSelections, ResolvedCache


def refresh_resolved_cache(
    tree: OptionTree, selections: LineItemOptionSelections
) -> LineItemOptionSelections:
    """
    Return a copy of `selections` with `resolved` recomputed.

    The input model is left untouched.
    """
    resolved = resolve_visible_path(tree, selections)
    cache = ResolvedCache(
        visible_node_ids=resolved.visible_node_ids,
        path_tags=resolved.path_tags,
        tree_fingerprint=tree_fingerprint(tree),
    )
    return selections.model_copy(update={"resolved": cache}, deep=True)


def is_resolved_cache_current(tree: OptionTree, selections: LineItemOptionSelections) -> bool:
    """
    Check whether the stored cache still matches the tree and selections.

    False when there is no cache, when it was computed against another tree
    version (or carries no fingerprint), or when a fresh resolution differs.
    """
    cache = selections.resolved
    if cache is None or cache.visible_node_ids is None:
        return False
    if cache.tree_fingerprint != tree_fingerprint(tree):
        return False

    resolved = resolve_visible_path(tree, selections)
    if cache.visible_node_ids != resolved.visible_node_ids:
        return False
    return (cache.path_tags or []) == resolved.path_tags
