from __future__ import annotations

import math

from ..models.rate_guide import RateGuideField

"""Profit-sharing ratio helpers.

Every ratio pair (Ethica/Customer, AT Ethica/AT Customer) must add up to 100%.
Both the file importer and single-entry validation check this through
ratio_pair_is_balanced() so the tolerance lives in exactly one place.
"""

__all__ = [
    "RATIO_SUM_TOLERANCE",
    "RATIO_PAIRS",
    "LINKED_RATIOS",
    "ratio_sum",
    "ratio_pair_is_balanced",
    "derive_linked_ratio",
]

RATIO_SUM_TOLERANCE = 0.01

RATIO_PAIRS: tuple[tuple[RateGuideField, RateGuideField], ...] = (
    (RateGuideField.ETHICA_RATIO, RateGuideField.CUSTOMER_RATIO),
    (RateGuideField.AT_ETHICA_RATIO, RateGuideField.AT_CUSTOMER_RATIO),
)

LINKED_RATIOS: dict[RateGuideField, RateGuideField] = {}
for _left, _right in RATIO_PAIRS:
    LINKED_RATIOS[_left] = _right
    LINKED_RATIOS[_right] = _left


def ratio_sum(a: float, b: float) -> float:
    """Sum of a ratio pair rounded to 4 places (hides 33.33 + 66.67 float noise)."""
    return round(a + b, 4)


def ratio_pair_is_balanced(a: float, b: float) -> bool:
    if not (math.isfinite(a) and math.isfinite(b)):
        return False
    return abs(ratio_sum(a, b) - 100) <= RATIO_SUM_TOLERANCE


def derive_linked_ratio(value: float) -> float:
    """Value for the partner field when one side of a pair is edited."""
    return round(max(0.0, 100 - value), 4)
