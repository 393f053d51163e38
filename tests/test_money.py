"""Tests for money parsing, rounding and epsilon comparisons."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from moneymonitor.errors import InvalidAmount
from moneymonitor.money import (
    as_utc,
    is_negligible,
    money_equal,
    positive_amount,
    to_money,
    utcnow,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12.345", Decimal("12.35")),
        ("1,250.5", Decimal("1250.50")),
        (0.1 + 0.2, Decimal("0.30")),
        (7, Decimal("7.00")),
        (Decimal("-3.004"), Decimal("-3.00")),
    ],
)
def test_to_money_quantizes_to_cents(raw, expected):
    assert to_money(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "", None, True, "NaN", float("inf")])
def test_to_money_rejects_non_numeric(raw):
    with pytest.raises(InvalidAmount):
        to_money(raw)


@pytest.mark.parametrize("raw", [0, "0.004", -5])
def test_positive_amount_rejects_zero_and_negative(raw):
    with pytest.raises(InvalidAmount):
        positive_amount(raw)


def test_epsilon_comparisons():
    assert is_negligible(Decimal("0.009"))
    assert not is_negligible(Decimal("0.01"))
    assert money_equal(Decimal("10.00"), Decimal("10.005"))
    assert not money_equal(Decimal("10.00"), Decimal("10.02"))


def test_utcnow_is_timezone_aware_utc():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_as_utc_attaches_utc_to_naive_values():
    assert as_utc(datetime(2025, 3, 1, 12, 0)) == datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_as_utc_converts_other_offsets():
    eastern = timezone(timedelta(hours=-5))
    converted = as_utc(datetime(2025, 3, 1, 7, 0, tzinfo=eastern))
    assert converted == datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert converted.tzinfo == timezone.utc


def test_as_utc_passes_none_through():
    assert as_utc(None) is None
