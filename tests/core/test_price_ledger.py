"""Price Ledger — tests for pure price normalization and ledger ordering.

Tests cover:
    - normalize_price quantizes to 4 fractional digits (half-even)
    - normalize_price rejects zero, negatives, non-numbers, non-finite, bools, overflow
    - record_price stamps UTC and clamps a backwards clock to the previous entry
    - ordered returns the ledger oldest-first or exactly reversed
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stockhub.core.errors import PriceValidationError
from stockhub.core.price_ledger import (
    as_utc, normalize_price, ordered, record_price,
)
from stockhub.core.projections import PriceEntry

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# ─── normalize_price ─────────────────────────────────────────────

def test_normalize_price_quantizes_to_four_digits():
    assert normalize_price("12.5") == Decimal("12.5000")
    assert str(normalize_price(3)) == "3.0000"


def test_normalize_price_float_goes_through_str():
    assert normalize_price(0.1) == Decimal("0.1000")


def test_normalize_price_rounds_half_even():
    assert normalize_price("1.00005") == Decimal("1.0000")
    assert normalize_price("1.00015") == Decimal("1.0002")


@pytest.mark.parametrize("value", [0, "0", -1, "-0.5", "0.00001"])
def test_normalize_price_rejects_non_positive(value):
    with pytest.raises(PriceValidationError) as exc:
        normalize_price(value)
    assert exc.value.code == "INVALID_PRICE"
    assert exc.value.field == "price"


@pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity", float("inf"), True])
def test_normalize_price_rejects_non_numbers(value):
    with pytest.raises(PriceValidationError):
        normalize_price(value)


def test_normalize_price_accepts_fifteen_integer_digits():
    assert normalize_price("999999999999999.9999") == Decimal("999999999999999.9999")


def test_normalize_price_rejects_sixteen_integer_digits():
    with pytest.raises(PriceValidationError):
        normalize_price("1000000000000000")


# ─── record_price ────────────────────────────────────────────────

def test_record_price_keeps_aware_timestamp():
    entry = record_price("10", T0)
    assert entry == PriceEntry(Decimal("10.0000"), T0)


def test_record_price_treats_naive_as_utc():
    entry = record_price("10", datetime(2024, 1, 1, 12, 0))
    assert entry.timestamp == T0


def test_record_price_clamps_backwards_clock():
    entry = record_price("10", T0 - timedelta(seconds=5), after=T0)
    assert entry.timestamp == T0


def test_record_price_keeps_forward_clock():
    later = T0 + timedelta(seconds=5)
    assert record_price("10", later, after=T0).timestamp == later


def test_as_utc_converts_other_zones():
    plus_two = timezone(timedelta(hours=2))
    assert as_utc(datetime(2024, 1, 1, 14, 0, tzinfo=plus_two)) == T0
    assert as_utc(datetime(2024, 1, 1, 14, 0, tzinfo=plus_two)).tzinfo == timezone.utc


# ─── ordering ────────────────────────────────────────────────────

def _ledger(n: int) -> list[PriceEntry]:
    return [
        PriceEntry(Decimal(i + 1), T0 + timedelta(minutes=i)) for i in range(n)
    ]


def test_ordered_oldest_first_by_default():
    ledger = _ledger(3)
    assert ordered(ledger) == ledger


def test_ordered_newest_first_is_exact_reverse():
    ledger = _ledger(4)
    assert ordered(ledger, newest_first=True) == list(reversed(ledger))


def test_ordered_does_not_resort_equal_timestamps():
    a = PriceEntry(Decimal("1"), T0)
    b = PriceEntry(Decimal("2"), T0)
    assert ordered([a, b], newest_first=True) == [b, a]

