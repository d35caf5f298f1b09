"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - StockId, ExchangeId wrap store-generated integers — never mix them in domain logic
    - Prices carry exactly PRICE_SCALE fractional digits and at most PRICE_INTEGER_DIGITS
      integer digits (NUMERIC(19, 4) in the store)
    - LIVE_THRESHOLD is the single default for the live-in-market guard

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (SSE payloads are JSON)
"""

from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

StockId = NewType("StockId", int)
ExchangeId = NewType("ExchangeId", int)


# ─── Constants ───────────────────────────────────────────────────

LIVE_THRESHOLD = 10

PRICE_PRECISION = 19
PRICE_SCALE = 4
PRICE_INTEGER_DIGITS = PRICE_PRECISION - PRICE_SCALE
PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_SCALE)     # Decimal("0.0001")

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000


# ─── Enums ───────────────────────────────────────────────────────

class EntityKind(str, Enum):
    """Entities that emit change notifications."""
    STOCK = "stock"
    EXCHANGE = "exchange"


class ChangeKind(str, Enum):
    """Committed mutation kinds broadcast to the notification sink."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
