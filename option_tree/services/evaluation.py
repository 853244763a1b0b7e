"""
Document-level entry points for host services.

The upload, order and pricing services hand over raw JSON documents; this
module parses them, runs the structural gate and the resolver, and records
logs and metrics around the pure engine.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from option_tree.core.config import settings
from option_tree.core.errors import DocumentSchemaError
from option_tree.engine.canonicalizer import tree_fingerprint
from option_tree.engine.resolver import resolve_visible_path
from option_tree.engine.validator import TreeValidationResult, validate_option_tree_v2
from option_tree.schemas.option_tree import OptionTree, parse_option_tree
from option_tree.schemas.selections import LineItemOptionSelections, parse_selections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptionEvaluation:
    """Resolution of one line item against one tree."""

    tree: OptionTree
    selections: LineItemOptionSelections
    visible_node_ids: list[str] = field(default_factory=list)
    path_tags: list[str] = field(default_factory=list)
    tree_fingerprint: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "visibleNodeIds": list(self.visible_node_ids),
            "pathTags": list(self.path_tags),
            "treeFingerprint": self.tree_fingerprint,
        }


def check_option_tree(doc: Any) -> TreeValidationResult:
    """
    Authoring-time check of a tree document.

    Collects structural violations and document-shape errors into one
    report so an editor can show every problem from a single save. Never
    raises.

    Args:
        doc: Raw OptionTree document (mapping)

    Returns:
        TreeValidationResult with structural errors first, then shape errors
    """
    structural = validate_option_tree_v2(doc)
    errors = list(structural.errors)

    try:
        parse_option_tree(doc)
    except DocumentSchemaError as e:
        errors.extend(e.details.get("errors", [e.message]))

    result = TreeValidationResult(errors=tuple(errors))
    _record_validation_metrics(result)

    if result.ok:
        logger.debug("Option tree passed validation")
    else:
        logger.info(
            "Option tree failed validation with %d error(s)",
            len(result.errors),
            extra={"validation_errors": list(result.errors)},
        )
    return result


def evaluate_option_selections(tree_doc: Any, selections_doc: Any) -> OptionEvaluation:
    """
    Resolve the visible nodes for a line item.

    Steps:
    1. Parse the tree and selections documents
    2. Validate tree structure (the resolver only trusts valid trees here)
    3. Resolve visible node ids and path tags
    4. Fingerprint the tree for the resolved cache

    Args:
        tree_doc: OptionTree document (mapping, JSON text or parsed model)
        selections_doc: LineItemOptionSelections document (mapping, JSON text or model)

    Returns:
        OptionEvaluation with the ordered visible node ids

    Raises:
        DocumentSchemaError: If either document has an invalid shape
        OptionTreeInvalidError: If the tree fails structural validation
    """
    start_time = time.time()

    try:
        tree = tree_doc if isinstance(tree_doc, OptionTree) else parse_option_tree(tree_doc)
        selections = (
            selections_doc
            if isinstance(selections_doc, LineItemOptionSelections)
            else parse_selections(selections_doc)
        )

        validation = validate_option_tree_v2(tree)
        _record_validation_metrics(validation)
        validation.raise_for_errors()

        resolved = resolve_visible_path(tree, selections)
        fingerprint = tree_fingerprint(tree)
    except Exception:
        _record_resolution_metrics("error", time.time() - start_time, 0)
        raise

    duration = time.time() - start_time
    _record_resolution_metrics("success", duration, len(resolved.visible_node_ids))

    logger.debug(
        "Resolved %d visible node(s) of %d in %.4fs",
        len(resolved.visible_node_ids),
        len(tree.nodes),
        duration,
    )

    return OptionEvaluation(
        tree=tree,
        selections=selections,
        visible_node_ids=resolved.visible_node_ids,
        path_tags=resolved.path_tags,
        tree_fingerprint=fingerprint,
    )


def _record_validation_metrics(result: TreeValidationResult) -> None:
    """Record a validation outcome; metric failures never break validation."""
    if not settings.metrics_enabled:
        return
    try:
        from option_tree.core.observability import metrics

        metrics.tree_validations_total.labels(result="ok" if result.ok else "invalid").inc()
        if not result.ok:
            metrics.tree_validation_errors.observe(len(result.errors))
    except Exception:
        logger.debug("Failed to record validation metrics", exc_info=True)


def _record_resolution_metrics(status: str, duration: float, visible_count: int) -> None:
    """Record a resolution outcome; metric failures never break resolution."""
    if not settings.metrics_enabled:
        return
    try:
        from option_tree.core.observability import metrics

        metrics.resolutions_total.labels(status=status).inc()
        metrics.resolution_duration_seconds.observe(duration)
        if status == "success":
            metrics.visible_nodes_count.observe(visible_count)
    except Exception:
        logger.debug("Failed to record resolution metrics", exc_info=True)
