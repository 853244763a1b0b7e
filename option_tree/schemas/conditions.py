"""
Condition expression models.

A condition is a small boolean AST discriminated on ``op``:

    {"op": "equals", "ref": "material", "value": "vinyl"}
    {"op": "and", "args": [{"op": "truthy", "ref": "lamination"}, ...]}
    {"op": "not", "arg": {"op": "contains", "ref": "finishing", "value": "grommets"}}

Leaf operators read one selection ``ref``; ``and``/``or``/``not`` nest
other conditions.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import Field

from option_tree.schemas.common import DocumentModel


class EqualsCondition(DocumentModel):
    op: Literal["equals"]
    ref: str
    value: Any = None


class NotEqualsCondition(DocumentModel):
    op: Literal["notEquals"]
    ref: str
    value: Any = None


class TruthyCondition(DocumentModel):
    op: Literal["truthy"]
    ref: str


class ContainsCondition(DocumentModel):
    op: Literal["contains"]
    ref: str
    value: Any = None


class AndCondition(DocumentModel):
    op: Literal["and"]
    args: list[ConditionExpr]


class OrCondition(DocumentModel):
    op: Literal["or"]
    args: list[ConditionExpr]


class NotCondition(DocumentModel):
    op: Literal["not"]
    arg: ConditionExpr


ConditionExpr = Annotated[
    EqualsCondition
    | NotEqualsCondition
    | TruthyCondition
    | ContainsCondition
    | AndCondition
    | OrCondition
    | NotCondition,
    Field(discriminator="op"),
]

AndCondition.model_rebuild()
OrCondition.model_rebuild()
NotCondition.model_rebuild()


def condition_depth(expr: ConditionExpr) -> int:
    """Nesting depth of a condition; a single leaf has depth 1."""
    if isinstance(expr, AndCondition | OrCondition):
        return 1 + max((condition_depth(arg) for arg in expr.args), default=0)
    if isinstance(expr, NotCondition):
        return 1 + condition_depth(expr.arg)
    return 1

