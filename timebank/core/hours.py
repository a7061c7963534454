"""Fixed-point helpers for quantities of hours.

Hours travel through the domain as ``Decimal`` values with two places and are
stored as integer hundredths of an hour ("centihours"), the same way money is
kept in integer cents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from timebank.core.errors import InvalidAmountError

HoursLike = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def quantize_hours(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_hours(value: HoursLike, *, allow_negative: bool = False) -> Decimal:
    """Convert user input to a two-place ``Decimal``.

    Floats go through ``str`` so ``0.1`` stays ``0.10``. Zero is never a valid
    amount; negative values only when ``allow_negative`` is set.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(value, "hours must be numeric")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError(value, "hours must be numeric") from exc
    if not amount.is_finite():
        raise InvalidAmountError(value, "hours must be finite")

    amount = quantize_hours(amount)
    if amount == 0:
        raise InvalidAmountError(value, "hours must not be zero")
    if amount < 0 and not allow_negative:
        raise InvalidAmountError(value)
    return amount


def to_centihours(hours: Decimal) -> int:
    return int((hours * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_centihours(centihours: int | None) -> Decimal:
    return Decimal(int(centihours or 0)).scaleb(-2)


__all__ = [
    "CENT",
    "HoursLike",
    "quantize_hours",
    "parse_hours",
    "to_centihours",
    "from_centihours",
]
