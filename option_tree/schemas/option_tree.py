"""
OptionTree (schemaVersion=2) document models.

One OptionTree JSON document is persisted per product by the catalog
service. These models validate that document at the boundary; graph
soundness (dangling edges, cycles) is checked separately by
`option_tree.engine.validator`.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Annotated, Any, Literal

from pydantic import Field

from option_tree.core.config import settings
from option_tree.core.errors import DocumentSchemaError
from option_tree.domain.enums import (
    InputType,
    LayoutHint,
    NodeKind,
    QuantityMode,
    ShippingPolicy,
    Sides,
    UnitSystem,
    WeightBasis,
    WeightUnit,
)
from option_tree.schemas.common import DocumentModel, validate_document
from option_tree.schemas.conditions import ConditionExpr, condition_depth

# =============================================================================
# Pricing / weight impacts
# =============================================================================
# Consumed by the external pricing and weight aggregators; never evaluated here.


class _ImpactBase(DocumentModel):
    apply_when: ConditionExpr | None = None
    label: str | None = None


class AddFlatPricing(_ImpactBase):
    mode: Literal["addFlat"]
    amount_cents: int


class AddPerQtyPricing(_ImpactBase):
    mode: Literal["addPerQty"]
    amount_cents: int


class AddPerSqftPricing(_ImpactBase):
    mode: Literal["addPerSqft"]
    amount_cents: int


class PercentOfBasePricing(_ImpactBase):
    mode: Literal["percentOfBase"]
    percent: float


class MultiplierPricing(_ImpactBase):
    mode: Literal["multiplier"]
    factor: float


PricingImpact = Annotated[
    AddFlatPricing
    | AddPerQtyPricing
    | AddPerSqftPricing
    | PercentOfBasePricing
    | MultiplierPricing,
    Field(discriminator="mode"),
]


class AddFlatWeight(_ImpactBase):
    mode: Literal["addFlat"]
    oz: float


class AddPerQtyWeight(_ImpactBase):
    mode: Literal["addPerQty"]
    oz: float


class AddPerSqftWeight(_ImpactBase):
    mode: Literal["addPerSqft"]
    oz: float


WeightImpact = Annotated[
    AddFlatWeight | AddPerQtyWeight | AddPerSqftWeight,
    Field(discriminator="mode"),
]

# =============================================================================
# Effects
# =============================================================================


class SetFlagEffect(DocumentModel):
    type: Literal["setFlag"]
    flag_code: str
    tone: str | None = None
    message: str | None = None


class RequireArtworkEffect(DocumentModel):
    type: Literal["requireArtwork"]
    required: bool


class SetMaterialEffect(DocumentModel):
    type: Literal["setMaterial"]
    material_id: str


class SetSidesEffect(DocumentModel):
    type: Literal["setSides"]
    sides: Sides


class SetProductionNoteEffect(DocumentModel):
    type: Literal["setProductionNote"]
    text: str


class MaterialUsageEffect(DocumentModel):
    type: Literal["materialUsage"]
    material_id: str
    quantity_mode: QuantityMode
    quantity: float


Effect = Annotated[
    SetFlagEffect
    | RequireArtworkEffect
    | SetMaterialEffect
    | SetSidesEffect
    | SetProductionNoteEffect
    | MaterialUsageEffect,
    Field(discriminator="type"),
]

# =============================================================================
# Nodes and edges
# =============================================================================


class BranchEdge(DocumentModel):
    to_node_id: str
    when: ConditionExpr | None = None
    effect_tag: str | None = None


class NodeEdges(DocumentModel):
    children: list[BranchEdge] | None = None


class NodeVisibility(DocumentModel):
    condition: ConditionExpr | None = None


class NodeUi(DocumentModel):
    group_key: str | None = None
    sort_order: float | None = None
    layout_hint: LayoutHint | None = None
    help_text: str | None = None
    badge: str | None = None


class NumberConstraints(DocumentModel):
    min: float | None = None
    max: float | None = None
    step: float | None = None
    integer_only: bool | None = None


class TextConstraints(DocumentModel):
    min_len: int | None = None
    max_len: int | None = None
    pattern: str | None = None


class SelectConstraints(DocumentModel):
    allow_empty: bool | None = None
    empty_label: str | None = None


class InputConstraints(DocumentModel):
    number: NumberConstraints | None = None
    text: TextConstraints | None = None
    select: SelectConstraints | None = None


class NodeInput(DocumentModel):
    type: InputType
    required: bool | None = None
    default_value: Any = None
    constraints: InputConstraints | None = None


class Choice(DocumentModel):
    value: str
    label: str
    description: str | None = None
    sort_order: float | None = None
    weight_oz: float | None = None


class OptionNode(DocumentModel):
    """One configuration element (question, group or computed value)."""

    id: str
    kind: NodeKind
    label: str
    description: str | None = None
    ui: NodeUi | None = None
    input: NodeInput | None = None
    choices: list[Choice] | None = None
    visibility: NodeVisibility | None = None
    edges: NodeEdges | None = None
    pricing_impact: list[PricingImpact] | None = None
    weight_impact: list[WeightImpact] | None = None
    effects: list[Effect] | None = None

    @property
    def sort_order(self) -> float:
        """UI sort order; missing or non-finite values sort as 0."""
        raw = self.ui.sort_order if self.ui else None
        if raw is None or not math.isfinite(raw):
            return 0
        return raw

    @property
    def children(self) -> list[BranchEdge]:
        if self.edges is None or self.edges.children is None:
            return []
        return self.edges.children

    @property
    def visibility_condition(self) -> ConditionExpr | None:
        return self.visibility.condition if self.visibility else None


# =============================================================================
# Tree metadata
# =============================================================================


class PricingV2Tier(DocumentModel):
    min_qty: int | None = Field(default=None, ge=1)
    min_sqft: float | None = Field(default=None, gt=0)
    per_sqft_cents: int | None = Field(default=None, ge=0)
    per_piece_cents: int | None = Field(default=None, ge=0)
    minimum_charge_cents: int | None = Field(default=None, ge=0)


class PricingV2Base(DocumentModel):
    per_sqft_cents: int | None = Field(default=None, ge=0)
    per_piece_cents: int | None = Field(default=None, ge=0)
    minimum_charge_cents: int | None = Field(default=None, ge=0)


class PricingV2(DocumentModel):
    unit_system: UnitSystem | None = None
    base: PricingV2Base | None = None
    qty_tiers: list[PricingV2Tier] | None = None
    sqft_tiers: list[PricingV2Tier] | None = None


class ShippingConfig(DocumentModel):
    shipping_policy: ShippingPolicy | None = None
    base_weight: float | None = Field(default=None, ge=0)
    weight_unit: WeightUnit | None = None
    weight_basis: WeightBasis | None = None


class ProductImage(DocumentModel):
    url: str
    file_name: str
    media_asset_id: str | None = None
    order_index: int = Field(ge=0)


class TreeMeta(DocumentModel):
    title: str | None = None
    updated_at: str | None = None
    updated_by_user_id: str | None = None
    notes: str | None = None
    base_weight_oz: float | None = None
    pricing_v2: PricingV2 | None = Field(default=None, alias="pricingV2")
    shipping_config: ShippingConfig | None = None
    product_images: list[ProductImage] | None = None


class OptionTree(DocumentModel):
    """The full option graph: ordered root ids plus the node arena."""

    schema_version: Literal[2]
    root_node_ids: list[str]
    nodes: dict[str, OptionNode]
    meta: TreeMeta | None = None

    def iter_conditions(self) -> Iterator[tuple[str, ConditionExpr]]:
        """Yield `(location, condition)` for every condition carried by the tree."""
        for node_id, node in self.nodes.items():
            if node.visibility_condition is not None:
                yield f"nodes.{node_id}.visibility.condition", node.visibility_condition
            for i, edge in enumerate(node.children):
                if edge.when is not None:
                    yield f"nodes.{node_id}.edges.children[{i}].when", edge.when
            for i, impact in enumerate(node.pricing_impact or []):
                if impact.apply_when is not None:
                    yield f"nodes.{node_id}.pricingImpact[{i}].applyWhen", impact.apply_when
            for i, impact in enumerate(node.weight_impact or []):
                if impact.apply_when is not None:
                    yield f"nodes.{node_id}.weightImpact[{i}].applyWhen", impact.apply_when


def parse_option_tree(doc: Any, max_condition_depth: int | None = None) -> OptionTree:
    """
    Parse an OptionTree document.

    Args:
        doc: Mapping, JSON text or bytes
        max_condition_depth: Deepest allowed condition nesting
                             (defaults to settings.condition_max_depth)

    Returns:
        Validated OptionTree model

    Raises:
        DocumentSchemaError: If the document shape is invalid or a condition
                             is nested too deeply
    """
    tree = validate_document(OptionTree, doc, "OptionTree")

    limit = max_condition_depth or settings.condition_max_depth
    too_deep = [
        f"{location}: condition nesting exceeds maximum depth of {limit}"
        for location, expr in tree.iter_conditions()
        if condition_depth(expr) > limit
    ]
    if too_deep:
        raise DocumentSchemaError(
            f"Invalid OptionTree document ({len(too_deep)} error(s))",
            details={"document": "OptionTree", "errors": too_deep},
        )

    return tree
