"""
JSON canonicalization and fingerprints for option tree documents.

The same tree always produces byte-for-byte identical canonical JSON, so
its sha256 can stamp a resolved cache: a cache computed against a
different fingerprint is stale by definition.
"""

import hashlib
import json
from typing import Any

from option_tree.schemas.option_tree import OptionTree


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON object.

    - All dictionary keys are sorted
    - Nested structures are recursively canonicalized
    - List order is preserved (rootNodeIds and edge order are data)

    Example:
        >>> canonicalize_json({"z": 1, "a": {"c": 2, "b": 3}})
        {'a': {'b': 3, 'c': 2}, 'z': 1}
    """
    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}

    elif isinstance(obj, list | tuple):
        return [canonicalize_json(item) for item in obj]

    else:
        return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert a Python object to a compact canonical JSON string.

    Example:
        >>> to_canonical_json_string({"schemaVersion": 2, "rootNodeIds": ["root"]})
        '{"rootNodeIds":["root"],"schemaVersion":2}'
    """
    canonical = canonicalize_json(obj)
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_canonical_json_pretty(obj: Any) -> str:
    """Pretty-printed canonical JSON, for CLI output and logs."""
    canonical = canonicalize_json(obj)
    return json.dumps(canonical, sort_keys=True, indent=2, ensure_ascii=False)


def tree_fingerprint(tree: OptionTree) -> str:
    """
    sha256 hex digest of a parsed tree's canonical document form.

    Key order and whitespace of the stored JSON do not affect the result.
    """
    canonical = to_canonical_json_string(tree.to_document())
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
