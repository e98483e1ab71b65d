"""
Money, volume and time rendering for the Indian market.

Rounding follows the browser's ``Number.toFixed`` so that a quantity shown
in the purchase preview is the very number that gets stored: the exact binary
value of the quotient is rounded half away from zero.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

from .clock import as_aware

CURRENCY_SYMBOL = "₹"
DEFAULT_TIMEZONE = "Asia/Kolkata"

_TWO_PLACES = Decimal("0.01")
_WHOLE = Decimal("1")


def round2(value: float) -> float:
    return float(Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def calculate_quantity(amount: float, price_per_liter: float) -> float:
    """Liters bought for ``amount`` at ``price_per_liter``, to 2 decimals.

    Raises ZeroDivisionError for a zero price; catalog prices are positive.
    """
    return round2(amount / price_per_liter)


def _group_indian(digits: str) -> str:
    # 12345678 -> 1,23,45,678
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: float) -> str:
    """Whole rupees with Indian digit grouping, e.g. 100000 -> "₹1,00,000"."""
    value = Decimal(str(amount)).quantize(_WHOLE, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(abs(int(value))))}"


def format_quantity(liters: float) -> str:
    return f"{Decimal(liters).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)} L"


def format_datetime(value: datetime | str, tz: str = DEFAULT_TIMEZONE) -> str:
    """Render like "19 Oct, 02:30 pm" in the station's timezone."""
    local = as_aware(value).astimezone(ZoneInfo(tz))
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{local:%d %b}, {local:%I:%M} {meridiem}"
