"""
Command line entry point.

Usage:
    option-tree validate TREE.json
    option-tree resolve TREE.json SELECTIONS.json [--write-cache]

Exit codes:
    0  success (tree valid / resolution printed)
    1  tree invalid or a document has the wrong shape
    2  a file could not be read or is not JSON
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from option_tree.core.config import settings
from option_tree.core.errors import DocumentSchemaError, OptionTreeInvalidError
from option_tree.core.observability import (
    configure_structured_logging,
    generate_correlation_id,
    set_correlation_id,
)
from option_tree.engine.canonicalizer import to_canonical_json_pretty
from option_tree.services.evaluation import check_option_tree, evaluate_option_selections
from option_tree.services.resolved_cache import refresh_resolved_cache

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_UNREADABLE = 2


class InputFileError(Exception):
    """Raised when an input file is missing or is not JSON."""


def _load_json(path: str) -> Any:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise InputFileError(f"Cannot read {path}: {e.strerror or e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputFileError(f"{path} is not valid JSON: {e}") from e


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="option-tree",
        description="Validate option trees and resolve visible options for a line item",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Check a tree document for errors")
    validate.add_argument("tree", help="Path to an OptionTree JSON document")

    resolve = subparsers.add_parser("resolve", help="Print the visible node ids for selections")
    resolve.add_argument("tree", help="Path to an OptionTree JSON document")
    resolve.add_argument("selections", help="Path to a LineItemOptionSelections JSON document")
    resolve.add_argument(
        "--write-cache",
        action="store_true",
        help="Write the refreshed resolved cache back into the selections file",
    )
    return parser


def _cmd_validate(args: argparse.Namespace) -> int:
    result = check_option_tree(_load_json(args.tree))
    print(to_canonical_json_pretty(result.to_dict()))
    return EXIT_OK if result.ok else EXIT_INVALID


def _cmd_resolve(args: argparse.Namespace) -> int:
    tree_doc = _load_json(args.tree)
    selections_doc = _load_json(args.selections)

    try:
        evaluation = evaluate_option_selections(tree_doc, selections_doc)
    except (DocumentSchemaError, OptionTreeInvalidError) as e:
        print(to_canonical_json_pretty({"ok": False, "error": e.message, **e.details}))
        return EXIT_INVALID

    print(to_canonical_json_pretty(evaluation.to_dict()))

    if args.write_cache:
        updated = refresh_resolved_cache(evaluation.tree, evaluation.selections)
        Path(args.selections).write_text(
            to_canonical_json_pretty(updated.to_document()) + "\n", encoding="utf-8"
        )
        logger.info("Wrote resolved cache to %s", args.selections)

    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = _build_parser().parse_args(argv)

    configure_structured_logging(
        level=settings.app_log_level,
        structured=settings.observability_structured_logs,
        service=settings.app_name,
        env=settings.app_env.value,
    )
    set_correlation_id(generate_correlation_id())

    try:
        if args.command == "validate":
            return _cmd_validate(args)
        return _cmd_resolve(args)
    except InputFileError as e:
        print(str(e), file=sys.stderr)
        return EXIT_UNREADABLE


if __name__ == "__main__":
    sys.exit(main())
