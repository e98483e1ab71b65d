from datetime import datetime, timezone

import pytest

from fuelflow.core.formatting import (
    calculate_quantity,
    format_currency,
    format_datetime,
    format_quantity,
)


def test_calculate_quantity_pinned_values():
    assert calculate_quantity(500, 100) == 5
    assert calculate_quantity(333, 95.5) == 3.49
    assert calculate_quantity(1000, 94.72) == 10.56


def test_calculate_quantity_rounds_half_away_from_zero():
    """Matches the browser: 1.125 is exact in binary and rounds up, 1.005 is just below half."""
    assert calculate_quantity(1.125, 1) == 1.13
    assert calculate_quantity(1.005, 1) == 1.0


@pytest.mark.parametrize("amount", [1, 50, 200, 333, 500, 777.77, 1000, 2000, 99999])
@pytest.mark.parametrize("price", [0.5, 76.0, 87.62, 94.72, 95.5, 100, 123.45])
def test_quantity_times_price_stays_within_rounding(amount, price):
    quantity = calculate_quantity(amount, price)
    assert abs(quantity * price - amount) <= 0.01 * price


def test_calculate_quantity_zero_price_raises():
    with pytest.raises(ZeroDivisionError):
        calculate_quantity(500, 0)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "₹0"),
        (500, "₹500"),
        (999.5, "₹1,000"),
        (1000, "₹1,000"),
        (100000, "₹1,00,000"),
        (1234567, "₹12,34,567"),
        (-250, "-₹250"),
    ],
)
def test_format_currency_indian_grouping(amount, expected):
    assert format_currency(amount) == expected


def test_format_quantity():
    assert format_quantity(5) == "5.00 L"
    assert format_quantity(3.49) == "3.49 L"
    assert format_quantity(10.5) == "10.50 L"


def test_format_datetime_in_station_timezone():
    utc = datetime(2025, 10, 19, 9, 0, tzinfo=timezone.utc)
    assert format_datetime(utc) == "19 Oct, 02:30 pm"
    assert format_datetime("2025-10-19T09:00:00+00:00") == "19 Oct, 02:30 pm"
    assert format_datetime("2025-10-18T20:00:00Z") == "19 Oct, 01:30 am"


def test_format_datetime_other_timezone():
    utc = datetime(2025, 10, 19, 9, 0, tzinfo=timezone.utc)
    assert format_datetime(utc, tz="UTC") == "19 Oct, 09:00 am"
