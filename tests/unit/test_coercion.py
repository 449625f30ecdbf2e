from __future__ import annotations

import math

import numpy as np
import pytest

from erp_toolkit.excel.coercion import (
    coerce,
    js_parse_float,
    js_parse_int,
    parse_amount,
    parse_int_field,
    parse_percent,
)
from erp_toolkit.models.rate_guide import CoercionKind


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("12.00%", 12.0),
        (" 6.5 % ", 6.5),
        ("1,250.75%", 1250.75),
        ("12abc", 12.0),
        (".5", 0.5),
        ("-3", -3.0),
        ("1e2", 100.0),
        (12.5, 12.5),
        (0, 0.0),
    ],
)
def test_parse_percent(raw, expected):
    assert parse_percent(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "%", "abc", None])
def test_parse_percent_blank_or_garbage_is_nan(raw):
    # blank is NaN, never zero
    assert math.isnan(parse_percent(raw))


def test_parse_amount_strips_separators_and_quotes():
    assert parse_amount('"50,000,000.00"') == 50_000_000.0
    assert parse_amount("99999999.99") == 99_999_999.99
    assert parse_amount(1500) == 1500.0
    assert math.isnan(parse_amount(""))
    assert math.isnan(parse_amount('""'))


def test_parse_amount_keeps_percent_sign_as_garbage_suffix():
    # only percent fields strip "%"; the numeric prefix still parses
    assert parse_amount("12%") == 12.0


def test_parse_int_field_rounds_numeric_cells_half_up():
    assert parse_int_field(90) == 90
    assert parse_int_field(90.4) == 90
    assert parse_int_field(90.5) == 91
    assert parse_int_field(np.int64(180)) == 180
    assert isinstance(parse_int_field(90.5), int)


def test_parse_int_field_text_uses_integer_prefix():
    assert parse_int_field("1,095") == 1095
    assert parse_int_field(" 90.9 ") == 90
    assert parse_int_field("30 days") == 30
    assert math.isnan(parse_int_field("days"))
    assert math.isnan(parse_int_field(""))


def test_parse_int_field_keeps_non_finite_numbers():
    assert math.isnan(parse_int_field(float("nan")))
    assert parse_int_field(float("inf")) == float("inf")


def test_booleans_are_not_numbers():
    assert math.isnan(parse_percent(True))


def test_js_prefix_parsers():
    assert js_parse_float("Infinity") == float("inf")
    assert js_parse_float("1e") == 1.0
    assert math.isnan(js_parse_float("e5"))
    assert js_parse_int("+42x") == 42
    assert math.isnan(js_parse_int("x42"))


def test_coerce_dispatches_on_kind():
    assert coerce(CoercionKind.INTEGER, "90") == 90
    assert coerce(CoercionKind.PERCENT, "5%") == 5.0
    assert coerce(CoercionKind.AMOUNT, "1,000") == 1000.0
