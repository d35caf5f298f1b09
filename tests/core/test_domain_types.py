"""Domain Types — tests for constants and enum serialization."""

from decimal import Decimal

from stockhub.core.domain_types import (
    LIVE_THRESHOLD, PRICE_INTEGER_DIGITS, PRICE_QUANTUM, ChangeKind, EntityKind,
)


def test_constants():
    assert LIVE_THRESHOLD == 10
    assert PRICE_QUANTUM == Decimal("0.0001")
    assert PRICE_INTEGER_DIGITS == 15


def test_enums_are_strings():
    assert EntityKind.STOCK == "stock"
    assert ChangeKind.DELETED.value == "deleted"
