"""Boundary Protocols — contracts between the core services and the persistent store.

Invariants:
    - Core NEVER imports from the shell — dependency arrows point inward only
    - Repositories exchange projections (StockView, ExchangeView, PriceEntry), never ORM rows
    - Every repository call happens inside one StoreTransaction; nothing is committed until
      the transaction context exits normally, and any exception rolls everything back
    - The optimistic version token is enforced by the store, invisible to callers: a lost
      race surfaces as ConcurrencyError when the transaction flushes

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Synchronous Protocols: the core is a synchronous domain layer invoked per request
    - deactivate_below may be one bulk UPDATE or a loop; both run inside the caller's
      transaction
"""

from contextlib import AbstractContextManager
from typing import Protocol

from stockhub.core.domain_types import ExchangeId, StockId
from stockhub.core.projections import (
    ChangeEvent, ExchangeView, PriceEntry, StockView,
)


class StockRepository(Protocol):
    """Contract for stock + price-ledger persistence — implemented by shell."""
    def list_all(self) -> list[StockView]: ...
    def get(self, stock_id: StockId) -> StockView | None: ...
    def find_id_by_name(self, name: str) -> StockId | None: ...
    def insert(
        self, name: str, description: str | None, opening: PriceEntry,
    ) -> StockView:
        """Persist a stock whose ledger starts with `opening`."""
        ...
    def append_price(self, stock_id: StockId, entry: PriceEntry) -> StockView:
        """Append `entry` and mirror it into current_price/last_update."""
        ...
    def price_history(self, stock_id: StockId) -> list[PriceEntry]:
        """Ledger oldest-first, ordered by (timestamp, id)."""
        ...
    def delete(self, stock_id: StockId) -> None:
        """Delete the stock and its ledger entries."""
        ...


class ExchangeRepository(Protocol):
    """Contract for exchange + membership persistence — implemented by shell."""
    def list_all(self) -> list[ExchangeView]: ...
    def get(self, exchange_id: ExchangeId) -> ExchangeView | None: ...
    def find_id_by_name(self, name: str) -> ExchangeId | None: ...
    def insert(
        self, name: str, description: str | None, live_in_market: bool,
    ) -> ExchangeView: ...
    def update_fields(
        self,
        exchange_id: ExchangeId,
        name: str | None = None,
        description: str | None = None,
        live_in_market: bool | None = None,
    ) -> ExchangeView:
        """Change only the fields that are not None."""
        ...
    def delete(self, exchange_id: ExchangeId) -> None:
        """Delete the exchange and its membership rows."""
        ...
    def ids_containing(self, stock_id: StockId) -> list[ExchangeId]: ...
    def count_members(self, exchange_id: ExchangeId) -> int: ...
    def has_member(self, exchange_id: ExchangeId, stock_id: StockId) -> bool: ...
    def add_member(self, exchange_id: ExchangeId, stock_id: StockId) -> None: ...
    def remove_member(self, exchange_id: ExchangeId, stock_id: StockId) -> bool:
        """Remove the link; False if it did not exist."""
        ...
    def remove_stock_everywhere(self, stock_id: StockId) -> None: ...
    def deactivate_below(
        self, exchange_ids: list[ExchangeId], threshold: int,
    ) -> list[ExchangeId]:
        """Set live_in_market=False where members < threshold; return ids that flipped."""
        ...


class StoreTransaction(Protocol):
    """One atomic unit of work over both repositories."""
    stocks: StockRepository
    exchanges: ExchangeRepository


class TransactionalStore(Protocol):
    """Hands out scoped transactions: commit on normal exit, rollback on any exception."""
    def transaction(self) -> AbstractContextManager[StoreTransaction]: ...


class NotificationSink(Protocol):
    """Fire-and-forget broadcast channel for committed changes."""
    def publish(self, event: ChangeEvent) -> None: ...
