"""
Initialize a v2 option tree from a product's legacy flat option list.

Legacy products store `optionsJson` as a flat list of options, each with a
type, an optional price mode/amount and an optional group. The v2 tree built
here has one `root` group, one group node per legacy group (in first-seen
order) and one question node per option beneath its group.
"""

import logging
import math
import re
from collections.abc import Mapping
from typing import Any

from option_tree.domain.enums import InputType, NodeKind
from option_tree.schemas.option_tree import (
    AddFlatPricing,
    AddPerQtyPricing,
    AddPerSqftPricing,
    MultiplierPricing,
    OptionTree,
    PercentOfBasePricing,
    PricingImpact,
    parse_option_tree,
)

logger = logging.getLogger(__name__)

ROOT_NODE_ID = "root"
DEFAULT_GROUP = ("options", "Options")

# Legacy option type -> v2 input type; anything else becomes free text
LEGACY_TYPE_TO_INPUT_TYPE = {
    "checkbox": InputType.BOOLEAN,
    "toggle": InputType.BOOLEAN,
    "quantity": InputType.NUMBER,
    "select": InputType.SELECT,
    "attachment": InputType.FILE,
}


def map_legacy_price_mode_to_pricing_impact(
    price_mode: str | None, amount: Any = None, label: str | None = None
) -> PricingImpact | None:
    """
    Map a legacy price mode and dollar amount to a v2 pricing impact.

    Args:
        price_mode: Legacy mode (flat, flat_per_item, flat_per_qty, per_qty,
                    per_sqft, percent_of_base, multiplier)
        amount: Dollar amount, percent or factor depending on the mode
        label: Optional label carried onto the impact

    Returns:
        The pricing impact, or None for an empty or unknown mode

    Example:
        >>> map_legacy_price_mode_to_pricing_impact("flat", 2.5)
        AddFlatPricing(apply_when=None, label=None, mode='addFlat', amount_cents=250)
    """
    mode = str(price_mode or "").strip()
    if not mode:
        return None

    if mode == "flat":
        return AddFlatPricing(mode="addFlat", amount_cents=_to_cents(amount), label=label)

    if mode in ("flat_per_item", "flat_per_qty", "per_qty"):
        return AddPerQtyPricing(mode="addPerQty", amount_cents=_to_cents(amount), label=label)

    if mode == "per_sqft":
        return AddPerSqftPricing(mode="addPerSqft", amount_cents=_to_cents(amount), label=label)

    if mode == "percent_of_base":
        return PercentOfBasePricing(
            mode="percentOfBase", percent=_to_number(amount, default=0), label=label
        )

    if mode == "multiplier":
        return MultiplierPricing(
            mode="multiplier", factor=_to_number(amount, default=1), label=label
        )

    return None


def build_option_tree_from_legacy_options(options_json: Any) -> OptionTree:
    """
    Build a v2 OptionTree from a legacy `optionsJson` list.

    Options without a usable id are skipped, as are options whose id collides
    with a node that already exists (the root, a group, or an earlier option).

    Args:
        options_json: Legacy option list; anything that is not a list yields
                      a tree holding only the root group

    Returns:
        Parsed OptionTree (schemaVersion 2)

    Raises:
        DocumentSchemaError: If a legacy option carries malformed choices
    """
    options = options_json if isinstance(options_json, list) else []

    nodes: dict[str, dict[str, Any]] = {
        ROOT_NODE_ID: {
            "id": ROOT_NODE_ID,
            "kind": NodeKind.GROUP.value,
            "label": "Options",
            "ui": {"sortOrder": 0},
            "edges": {"children": []},
        }
    }
    group_node_ids: dict[str, str] = {}

    for index, option in enumerate(options):
        if not isinstance(option, Mapping):
            continue

        node_id = _normalize_id(option.get("id"))
        if not node_id:
            continue
        if node_id in nodes:
            logger.warning("Skipping legacy option '%s': node id already in use", node_id)
            continue

        group_node_id = _ensure_group_node(
            nodes, group_node_ids, _legacy_group(option), reserved=node_id
        )
        nodes[node_id] = _build_question_node(node_id, option, index)
        nodes[group_node_id]["edges"]["children"].append({"toNodeId": node_id})

    logger.info(
        "Initialized option tree from %d legacy option(s): %d group(s), %d node(s)",
        len(options),
        len(group_node_ids),
        len(nodes),
    )

    return parse_option_tree(
        {
            "schemaVersion": 2,
            "rootNodeIds": [ROOT_NODE_ID],
            "nodes": nodes,
            "meta": {"title": "Initialized from legacy optionsJson"},
        }
    )


def _build_question_node(node_id: str, option: Mapping[str, Any], index: int) -> dict[str, Any]:
    label = str(option.get("label") or option.get("id") or "Option")
    legacy_type = option.get("type")
    input_type = (
        LEGACY_TYPE_TO_INPUT_TYPE.get(legacy_type, InputType.TEXT)
        if isinstance(legacy_type, str)
        else InputType.TEXT
    )

    sort_order = option.get("sortOrder")
    if not _is_number(sort_order):
        sort_order = index

    node_input: dict[str, Any] = {
        "type": input_type.value,
        "required": bool(option.get("required")),
    }
    default_value = _legacy_default_value(option, input_type)
    if default_value is not None:
        node_input["defaultValue"] = default_value

    node: dict[str, Any] = {
        "id": node_id,
        "kind": NodeKind.QUESTION.value,
        "label": label,
        "ui": {"sortOrder": sort_order},
        "input": node_input,
    }

    choices = option.get("choices")
    if isinstance(choices, list):
        node["choices"] = choices

    impact = map_legacy_price_mode_to_pricing_impact(
        option.get("priceMode"), option.get("amount"), label
    )
    if impact is not None:
        node["pricingImpact"] = [impact.to_document()]

    return node


def _legacy_default_value(option: Mapping[str, Any], input_type: InputType) -> Any:
    if input_type == InputType.BOOLEAN:
        return (
            option.get("defaultChecked") is True
            or option.get("defaultSelected") is True
            or option.get("defaultValue") is True
        )
    if input_type == InputType.NUMBER:
        default_qty = option.get("defaultQty")
        return default_qty if _is_number(default_qty) else option.get("defaultValue")
    if input_type == InputType.SELECT:
        default_value = option.get("defaultValue")
        return default_value if isinstance(default_value, str) else None
    return option.get("defaultValue")


def _legacy_group(option: Mapping[str, Any]) -> tuple[str, str]:
    """(group key, group label) for a legacy option."""
    key = str(option.get("groupKey") or option.get("group") or "").strip()
    label = str(option.get("groupLabel") or option.get("group") or option.get("groupKey") or "")
    if key:
        return key, label.strip() or key
    return DEFAULT_GROUP


def _ensure_group_node(
    nodes: dict[str, dict[str, Any]],
    group_node_ids: dict[str, str],
    group: tuple[str, str],
    reserved: str,
) -> str:
    """Group node id for `group`, creating the node on first use; never takes `reserved`."""
    key, label = group
    if key in group_node_ids:
        return group_node_ids[key]

    group_node_id = _normalize_id(f"group_{key}")
    suffix = len(group_node_ids) + 1
    while group_node_id in nodes or group_node_id == reserved:
        group_node_id = f"group_{suffix}"
        suffix += 1

    group_node_ids[key] = group_node_id
    nodes[group_node_id] = {
        "id": group_node_id,
        "kind": NodeKind.GROUP.value,
        "label": label,
        "ui": {"groupKey": key},
        "edges": {"children": []},
    }
    nodes[ROOT_NODE_ID]["edges"]["children"].append({"toNodeId": group_node_id})
    return group_node_id


def _normalize_id(raw: Any) -> str:
    """Stable node id: trimmed, inner whitespace runs replaced by underscores."""
    return re.sub(r"\s+", "_", str(raw if raw is not None else "").strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)


def _to_number(value: Any, default: float) -> float:
    """Coerce a legacy amount to a finite float, falling back to `default`."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _to_cents(dollars: Any) -> int:
    """Dollars to integer cents, rounding half up."""
    return math.floor(_to_number(dollars, default=0) * 100 + 0.5)
