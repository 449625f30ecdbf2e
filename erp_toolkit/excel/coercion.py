from __future__ import annotations

import math
import numbers
import re
from typing import Any

from ..models.rate_guide import CoercionKind

"""Cell -> number coercion for rate guide uploads.

Files produced by the dashboard (and by hand in Excel) write percentages as
"12.00%" and amounts as "50,000,000.00" or with CSV quotes around them. The
rules below reproduce the dashboard importer exactly, including its prefix
parsing: "12abc" reads as 12, "abc" as NaN. An empty cell is NaN, never 0.
"""

__all__ = [
    "js_parse_float",
    "js_parse_int",
    "parse_percent",
    "parse_amount",
    "parse_int_field",
    "coerce",
]

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def _is_number(raw: Any) -> bool:
    return isinstance(raw, numbers.Real) and not isinstance(raw, bool)


def _as_text(raw: Any) -> str:
    return "" if raw is None else str(raw)


def js_parse_float(text: str) -> float:
    """Longest numeric prefix as float, NaN when there is none."""
    m = _FLOAT_PREFIX.match(text)
    if not m:
        return math.nan
    # an incomplete exponent ("1e", "1e+") is left out of the match, as in JS
    return float(m.group(1))


def js_parse_int(text: str) -> int | float:
    m = _INT_PREFIX.match(text)
    if not m:
        return math.nan
    return int(m.group(1))


def _round_half_up(value: float) -> int | float:
    if not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def parse_percent(raw: Any) -> float:
    if _is_number(raw):
        return float(raw)
    s = _as_text(raw).replace("%", "").replace(",", "").strip()
    return math.nan if s == "" else js_parse_float(s)


def parse_amount(raw: Any) -> float:
    if _is_number(raw):
        return float(raw)
    s = _as_text(raw).replace(",", "").replace('"', "").strip()
    return math.nan if s == "" else js_parse_float(s)


def parse_int_field(raw: Any) -> int | float:
    if _is_number(raw):
        return _round_half_up(float(raw))
    s = _as_text(raw).replace(",", "").strip()
    return math.nan if s == "" else js_parse_int(s)


_COERCERS = {
    CoercionKind.INTEGER: parse_int_field,
    CoercionKind.PERCENT: parse_percent,
    CoercionKind.AMOUNT: parse_amount,
}


def coerce(kind: CoercionKind, raw: Any) -> int | float:
    return _COERCERS[kind](raw)
