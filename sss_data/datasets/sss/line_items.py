"""
Display labels and groupings for Standard line items and family types.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class LineGroup(Enum):
    COSTS = "Costs"
    TAX_EFFECTS = "Tax Effects"
    OTHER = "Other"
    MINIMUM_INCOME = "Minimum Income"

    def __str__(self):
        return self.value


LINE_GROUPS = {
    "Housing": LineGroup.COSTS,
    "Child Care": LineGroup.COSTS,
    "Food": LineGroup.COSTS,
    "Transportation": LineGroup.COSTS,
    "Health Care": LineGroup.COSTS,
    "Miscellaneous": LineGroup.COSTS,
    "Taxes": LineGroup.TAX_EFFECTS,
    "Earned Income Tax Credit": LineGroup.TAX_EFFECTS,
    "Child Care Tax Credit": LineGroup.TAX_EFFECTS,
    "Emergency Savings": LineGroup.OTHER,
}

# Everything not listed above, including the computed wage rows.
DEFAULT_LINE_GROUP = LineGroup.MINIMUM_INCOME

# Compact code: a<adults>i<infants>p<preschoolers>s<school-agers>t<teenagers>
FAMILY_TYPE_LABELS = {
    "a1i0p0s0t0": "1 Adult",
    "a2i0p0s0t0": "2 Adults",
    "a1i1p0s0t0": "1 Adult, 1 Infant",
    "a1i0p1s0t0": "1 Adult, 1 Preschooler",
    "a1i0p1s1t0": "1 Adult, 1 Preschooler, 1 School-age",
    "a1i0p0s1t1": "1 Adult, 1 School-age, 1 Teenager",
    "a2i1p0s0t0": "2 Adults, 1 Infant",
    "a2i1p1s0t0": "2 Adults, 1 Infant, 1 Preschooler",
    "a2i0p1s1t0": "2 Adults, 1 Preschooler, 1 School-age",
    "a2i0p0s1t1": "2 Adults, 1 School-age, 1 Teenager",
}
FAMILY_TYPE_CODES = {
    label: code for code, label in FAMILY_TYPE_LABELS.items()
}


def line_item_label(column: str) -> str:
    """``housing_costs`` -> ``Housing``; ``taxes`` -> ``Taxes``."""
    words = [w for w in str(column).replace("_", " ").split(" ") if w]
    label = " ".join(w.capitalize() for w in words)
    if label.endswith(" Costs"):
        label = label[: -len(" Costs")]
    return label


def classify_line_item(label: str) -> LineGroup:
    return LINE_GROUPS.get(label, DEFAULT_LINE_GROUP)


def decode_family_type(code: str) -> str:
    """Readable label for a family-type code.

    Codes without an entry in ``FAMILY_TYPE_LABELS`` are returned unchanged.
    """
    label = FAMILY_TYPE_LABELS.get(code)
    if label is None:
        logger.debug(f"No label for family type {code!r}; leaving as is")
        return code
    return label
