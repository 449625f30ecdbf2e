from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Rate guide domain models.

A rate guide entry is a tenor-keyed band of indicative rate and profit-sharing
ratios used as the default when an investment is booked. The same nine fields
travel through three shapes:

- spreadsheet headers (``"at ethica ratio"``) on import/export
- Python attributes (``above_target_ethica_ratio``) on ``RateGuidePayload``
- camelCase keys (``aboveTargetEthicaRatio``) on the REST wire

``RateGuideField`` is the single table tying those shapes together.
"""

__all__ = [
    "CoercionKind",
    "RateGuideField",
    "HEADER_TO_FIELD",
    "RateGuidePayload",
    "RateGuide",
]


class CoercionKind(Enum):
    """How a raw cell is turned into a number."""
    INTEGER = "integer"
    PERCENT = "percent"
    AMOUNT = "amount"


class RateGuideField(Enum):
    """The nine canonical rate guide columns, in spreadsheet order."""

    TENOR = ("tenor", "Tenor", "tenor", "tenor", CoercionKind.INTEGER)
    INDICATIVE_RATE = (
        "indicative rate", "Indicative Rate", "indicative_rate", "indicativeRate", CoercionKind.PERCENT
    )
    MINIMUM_SPREAD = (
        "minimum spread", "Minimum Spread", "minimum_spread", "minimumSpread", CoercionKind.PERCENT
    )
    ETHICA_RATIO = ("ethica ratio", "Ethica Ratio", "ethica_ratio", "ethicaRatio", CoercionKind.PERCENT)
    CUSTOMER_RATIO = (
        "customer ratio", "Customer Ratio", "customer_ratio", "customerRatio", CoercionKind.PERCENT
    )
    AT_ETHICA_RATIO = (
        "at ethica ratio",
        "AT Ethica Ratio",
        "above_target_ethica_ratio",
        "aboveTargetEthicaRatio",
        CoercionKind.PERCENT,
    )
    AT_CUSTOMER_RATIO = (
        "at customer ratio",
        "AT Customer Ratio",
        "above_target_customer_ratio",
        "aboveTargetCustomerRatio",
        CoercionKind.PERCENT,
    )
    MINIMUM_AMOUNT = (
        "minimum amount", "Minimum Amount", "minimum_amount", "minimumAmount", CoercionKind.AMOUNT
    )
    MAXIMUM_AMOUNT = (
        "maximum amount", "Maximum Amount", "maximum_amount", "maximumAmount", CoercionKind.AMOUNT
    )

    def __init__(self, header: str, label: str, attr: str, wire_name: str, kind: CoercionKind) -> None:
        self.header = header  # lowercase canonical header
        self.label = label  # display header used by template/export
        self.attr = attr  # RateGuidePayload attribute
        self.wire_name = wire_name  # REST JSON key
        self.kind = kind

    @classmethod
    def from_header(cls, raw_header: str) -> RateGuideField | None:
        """Resolve a spreadsheet header (trim + case-insensitive)."""
        return HEADER_TO_FIELD.get(raw_header.strip().lower())


HEADER_TO_FIELD: dict[str, RateGuideField] = {f.header: f for f in RateGuideField}


@dataclass(frozen=True)
class RateGuidePayload:
    """Create/bulk-replace payload for one rate guide entry.

    Unparseable numeric cells are carried as ``nan`` so that validation can
    report them per field instead of silently defaulting to zero.
    """
    tenor: int | float
    indicative_rate: float
    minimum_spread: float
    ethica_ratio: float
    customer_ratio: float
    above_target_ethica_ratio: float
    above_target_customer_ratio: float
    minimum_amount: float
    maximum_amount: float

    def get(self, field: RateGuideField) -> int | float:
        return getattr(self, field.attr)

    def has_any_value(self) -> bool:
        """True if at least one field holds a finite number."""
        return any(math.isfinite(self.get(f)) for f in RateGuideField)

    def to_api(self) -> dict[str, Any]:
        return {f.wire_name: self.get(f) for f in RateGuideField}

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RateGuidePayload:
        values: dict[str, Any] = {}
        for f in RateGuideField:
            raw = data.get(f.wire_name)
            # the backend serialises numeric columns as strings
            num = float(raw) if raw is not None and raw != "" else math.nan
            if f.kind is CoercionKind.INTEGER and math.isfinite(num) and num.is_integer():
                num = int(num)
            values[f.attr] = num
        return cls(**values)


@dataclass(frozen=True)
class RateGuide:
    """A persisted rate guide entry as returned by the API."""
    id: str
    payload: RateGuidePayload
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RateGuide:
        return cls(
            id=str(data["id"]),
            payload=RateGuidePayload.from_api(data),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

