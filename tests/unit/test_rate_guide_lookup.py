from __future__ import annotations

from erp_toolkit.models.rate_guide import RateGuide, RateGuidePayload
from erp_toolkit.services.rate_guide_lookup import find_matching_rate_guide


def _guide(gid: str, tenor: int, lo: float, hi: float) -> RateGuide:
    payload = RateGuidePayload(
        tenor=tenor,
        indicative_rate=12.0,
        minimum_spread=6.0,
        ethica_ratio=40.0,
        customer_ratio=60.0,
        above_target_ethica_ratio=70.0,
        above_target_customer_ratio=30.0,
        minimum_amount=lo,
        maximum_amount=hi,
    )
    return RateGuide(id=gid, payload=payload)


GUIDES = [
    _guide("a", 90, 1_000_000, 9_999_999.99),
    _guide("b", 90, 10_000_000, 49_999_999.99),
    _guide("c", 180, 1_000_000, 49_999_999.99),
]


def test_matches_tenor_and_band():
    assert find_matching_rate_guide(GUIDES, 90, 20_000_000).id == "b"
    assert find_matching_rate_guide(GUIDES, 180, 20_000_000).id == "c"


def test_band_edges_are_inclusive():
    assert find_matching_rate_guide(GUIDES, 90, 1_000_000).id == "a"
    assert find_matching_rate_guide(GUIDES, 90, 9_999_999.99).id == "a"


def test_no_match():
    assert find_matching_rate_guide(GUIDES, 30, 5_000_000) is None
    assert find_matching_rate_guide(GUIDES, 90, 999_999) is None
    assert find_matching_rate_guide([], 90, 5_000_000) is None
    assert find_matching_rate_guide(GUIDES, 0, 5_000_000) is None
    assert find_matching_rate_guide(GUIDES, 90, 0) is None
