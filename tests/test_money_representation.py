"""Money and time helper tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from pocketwallet.errors import InvalidAmount
from pocketwallet.money import non_negative_money, positive_money, to_money
from pocketwallet.timeutils import add_months, sunday_weekday, to_utc


@pytest.mark.parametrize(
    "value,expected",
    [
        (0.1, Decimal("0.10")),
        ("19.999", Decimal("20.00")),
        ("0.005", Decimal("0.01")),
        ("-0.005", Decimal("-0.01")),
        (7, Decimal("7.00")),
        (Decimal("1.234"), Decimal("1.23")),
    ],
)
def test_to_money_rounds_half_up_to_cents(value, expected):
    assert to_money(value) == expected


@pytest.mark.parametrize("value", [True, "abc", "NaN", float("inf"), None])
def test_to_money_rejects_non_numbers(value):
    with pytest.raises(InvalidAmount):
        to_money(value)


def test_positive_and_non_negative():
    assert non_negative_money(0) == Decimal("0.00")
    with pytest.raises(InvalidAmount):
        non_negative_money("-0.01")
    with pytest.raises(InvalidAmount):
        positive_money("0.004")


def test_to_utc_normalizes_aware_values():
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert to_utc(aware) == datetime(2024, 1, 1, 17, 0)
    assert to_utc(datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 1, 12, 0)


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 12, 15), 2) == date(2025, 2, 15)
    assert add_months(datetime(2023, 3, 31, 8, 30), -1) == datetime(2023, 2, 28, 8, 30)


def test_sunday_weekday():
    assert sunday_weekday(date(2024, 1, 7)) == 0  # Sunday
    assert sunday_weekday(date(2024, 1, 13)) == 6  # Saturday
