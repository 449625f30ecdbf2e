from __future__ import annotations

from collections.abc import Sequence

from ..models.rate_guide import RateGuide


def find_matching_rate_guide(guides: Sequence[RateGuide], tenor_days: int, amount: float) -> RateGuide | None:
    """First rate guide whose tenor equals tenor_days and whose amount band holds amount.

    Band edges are inclusive on both sides. Returns None for an empty list or a
    non-positive tenor/amount.
    """
    if not guides or tenor_days <= 0 or amount <= 0:
        return None
    for g in guides:
        p = g.payload
        if p.tenor == tenor_days and p.minimum_amount <= amount <= p.maximum_amount:
            return g
    return None
