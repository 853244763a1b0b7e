"""
Pydantic models for the v2 option tree documents.

- conditions: the condition expression AST
- option_tree: OptionTree, OptionNode, BranchEdge, impacts, effects, metadata
- selections: LineItemOptionSelections and its resolved cache
"""

from option_tree.schemas.conditions import (
    AndCondition,
    ConditionExpr,
    ContainsCondition,
    EqualsCondition,
    NotCondition,
    NotEqualsCondition,
    OrCondition,
    TruthyCondition,
)
from option_tree.schemas.option_tree import (
    BranchEdge,
    OptionNode,
    OptionTree,
    parse_option_tree,
)
from option_tree.schemas.selections import (
    LineItemOptionSelections,
    ResolvedCache,
    SelectionEntry,
    parse_selections,
)

__all__ = [
    "AndCondition",
    "BranchEdge",
    "ConditionExpr",
    "ContainsCondition",
    "EqualsCondition",
    "LineItemOptionSelections",
    "NotCondition",
    "NotEqualsCondition",
    "OptionNode",
    "OptionTree",
    "OrCondition",
    "ResolvedCache",
    "SelectionEntry",
    "TruthyCondition",
    "parse_option_tree",
    "parse_selections",
]
