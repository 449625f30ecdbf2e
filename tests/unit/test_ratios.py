from __future__ import annotations

import math

import pytest

from erp_toolkit.models.rate_guide import RateGuideField
from erp_toolkit.services.ratios import (
    LINKED_RATIOS,
    RATIO_SUM_TOLERANCE,
    derive_linked_ratio,
    ratio_pair_is_balanced,
    ratio_sum,
)


def test_single_tolerance_constant():
    assert RATIO_SUM_TOLERANCE == 0.01


def test_ratio_sum_rounds_float_noise():
    assert ratio_sum(33.33, 66.67) == 100.0
    assert ratio_sum(0.1, 0.2) == 0.3


@pytest.mark.parametrize(
    "a,b,expected",
    [
        (33.33, 66.67, True),
        (33.33, 66.66, False),
        (50, 50.005, True),
        (50, 50.02, False),
        (100, 0, True),
        (math.nan, 100, False),
        (math.inf, -math.inf, False),
    ],
)
def test_ratio_pair_is_balanced(a, b, expected):
    assert ratio_pair_is_balanced(a, b) is expected


def test_linked_ratios_are_symmetric():
    assert LINKED_RATIOS[RateGuideField.ETHICA_RATIO] is RateGuideField.CUSTOMER_RATIO
    assert LINKED_RATIOS[RateGuideField.CUSTOMER_RATIO] is RateGuideField.ETHICA_RATIO
    assert LINKED_RATIOS[RateGuideField.AT_CUSTOMER_RATIO] is RateGuideField.AT_ETHICA_RATIO
    assert RateGuideField.TENOR not in LINKED_RATIOS


def test_derive_linked_ratio():
    assert derive_linked_ratio(33.33) == 66.67
    assert derive_linked_ratio(0) == 100
    assert derive_linked_ratio(120) == 0
