"""Projections — plain, immutable views of stored entities for the transport layer.

Invariants:
    - No persistence-framework artifacts: projections are frozen dataclasses of primitives,
      Decimal and datetime
    - The optimistic version token never appears in a projection
    - to_dict() emits the camelCase wire shape (currentPrice, liveInMarket, ...)
    - exchange_ids / stock_ids are sorted so equal states produce equal projections

Design Decisions:
    - Prices serialized as strings: JSON floats would lose the 4-digit fixed-point scale
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from stockhub.core.domain_types import (
    ChangeKind, EntityKind, ExchangeId, StockId,
)


@dataclass(frozen=True)
class PriceEntry:
    """One immutable price-ledger record."""
    price: Decimal
    timestamp: datetime

    def to_dict(self) -> dict:
        return {"price": str(self.price), "timestamp": self.timestamp.isoformat()}


@dataclass(frozen=True)
class StockView:
    """Stock projection — current price mirrors the newest ledger entry."""
    id: StockId
    name: str
    description: str | None
    current_price: Decimal
    last_update: datetime
    exchange_ids: tuple[ExchangeId, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "currentPrice": str(self.current_price),
            "lastUpdate": self.last_update.isoformat(),
            "exchangeIds": list(self.exchange_ids),
        }


@dataclass(frozen=True)
class ExchangeView:
    """Exchange projection — stock_ids is the membership set."""
    id: ExchangeId
    name: str
    description: str | None
    live_in_market: bool
    stock_ids: tuple[StockId, ...] = ()

    @property
    def member_count(self) -> int:
        return len(self.stock_ids)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "liveInMarket": self.live_in_market,
            "stockIds": list(self.stock_ids),
        }


@dataclass(frozen=True)
class ChangeEvent:
    """Committed mutation, broadcast after the transaction closes."""
    entity: EntityKind
    kind: ChangeKind
    payload: dict = field(default_factory=dict)

    @classmethod
    def of_stock(cls, kind: ChangeKind, view: StockView) -> "ChangeEvent":
        return cls(EntityKind.STOCK, kind, view.to_dict())

    @classmethod
    def of_exchange(cls, kind: ChangeKind, view: ExchangeView) -> "ChangeEvent":
        return cls(EntityKind.EXCHANGE, kind, view.to_dict())

    @classmethod
    def deleted(cls, entity: EntityKind, entity_id: int) -> "ChangeEvent":
        return cls(entity, ChangeKind.DELETED, {"id": entity_id})

    def to_dict(self) -> dict:
        return {
            "entity": self.entity.value,
            "kind": self.kind.value,
            "data": self.payload,
        }
