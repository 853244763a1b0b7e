"""
Domain enums matching the v2 option tree document vocabulary.

Values are the exact strings stored in OptionTree JSON documents.
"""

from enum import Enum


class NodeKind(str, Enum):
    """Kind of configuration node."""

    QUESTION = "question"
    GROUP = "group"
    COMPUTED = "computed"


class InputType(str, Enum):
    """Input widget type for leaf questions."""

    BOOLEAN = "boolean"
    SELECT = "select"
    MULTISELECT = "multiselect"
    NUMBER = "number"
    TEXT = "text"
    TEXTAREA = "textarea"
    FILE = "file"
    DIMENSION = "dimension"


class LayoutHint(str, Enum):
    """UI layout hint for a node."""

    INLINE = "inline"
    STACK = "stack"
    GRID = "grid"
    COMPACT = "compact"


class Sides(str, Enum):
    """Single- or double-sided print."""

    SS = "SS"
    DS = "DS"


class QuantityMode(str, Enum):
    """How a materialUsage effect scales."""

    PER_SQFT = "per_sqft"
    PER_QTY = "per_qty"
    FIXED = "fixed"


class UnitSystem(str, Enum):
    IMPERIAL = "imperial"
    METRIC = "metric"


class ShippingPolicy(str, Enum):
    PICKUP_ONLY = "pickup_only"
    SHIPPABLE_ESTIMATE = "shippable_estimate"
    SHIPPABLE_CUSTOM_QUOTE = "shippable_custom_quote"


class WeightUnit(str, Enum):
    LB = "lb"
    OZ = "oz"
    G = "g"
    KG = "kg"


class WeightBasis(str, Enum):
    PER_ITEM = "per_item"
    PER_SQFT = "per_sqft"
    PER_ORDER = "per_order"
