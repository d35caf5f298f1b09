"""Price Ledger — pure construction and ordering of append-only price entries.

Invariants:
    - All functions are PURE: no IO, no DB; the clock is injected by the caller
    - A recorded entry's price is finite, strictly positive, quantized to PRICE_SCALE digits
    - Entry timestamps are timezone-aware UTC
    - The ledger is never re-sorted: the oldest-first sequence is the source of truth and
      the newest-first view is its exact reverse

Design Decisions:
    - ROUND_HALF_EVEN quantization: matches NUMERIC(19, 4) rounding in the store and avoids
      upward bias on repeated updates
    - Values arriving as float are converted through str() so 0.1 stays 0.1000
"""

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN

from stockhub.core.domain_types import PRICE_INTEGER_DIGITS, PRICE_QUANTUM
from stockhub.core.errors import PriceValidationError
from stockhub.core.projections import PriceEntry

Clock = Callable[[], datetime]
PriceInput = Decimal | int | float | str


def utc_now() -> datetime:
    """Default clock for services."""
    return datetime.now(timezone.utc)


def normalize_price(value: PriceInput) -> Decimal:
    """Coerce to a fixed-point Decimal or raise PriceValidationError."""
    if isinstance(value, bool):
        raise PriceValidationError("Price must be a number")
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise PriceValidationError(f"Price is not a number: {value!r}")
    if not price.is_finite():
        raise PriceValidationError("Price must be finite")
    price = price.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_EVEN)
    if price <= 0:
        raise PriceValidationError("Price must be greater than 0")
    if price.adjusted() >= PRICE_INTEGER_DIGITS:
        raise PriceValidationError(
            f"Price exceeds {PRICE_INTEGER_DIGITS} integer digits",
        )
    return price


def as_utc(moment: datetime) -> datetime:
    """Normalize a timestamp to aware UTC; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def record_price(
    value: PriceInput,
    at: datetime,
    after: datetime | None = None,
) -> PriceEntry:
    """Build the next ledger entry for a price change observed at `at`.

    `after` is the timestamp of the current newest entry; a clock that stepped
    backwards is clamped to it so the new entry still sorts last.
    """
    timestamp = as_utc(at)
    if after is not None:
        timestamp = max(timestamp, as_utc(after))
    return PriceEntry(price=normalize_price(value), timestamp=timestamp)


def ordered(
    entries: Iterable[PriceEntry], newest_first: bool = False,
) -> list[PriceEntry]:
    """Return the oldest-first ledger, or its reverse for display."""
    history = list(entries)
    if newest_first:
        history.reverse()
    return history
