"""Stock Lifecycle Manager — stock CRUD with an append-only price ledger.

Invariants:
    - Every price mutation (create, update_price) appends exactly one ledger entry, and
      current_price/last_update mirror that entry
    - update_price is one read-modify-write guarded by the store's optimistic version; a
      lost race raises ConcurrencyError and is never retried here
    - delete() is ONE transaction: unlink from every exchange, delete the stock and its
      ledger, repair live_in_market on the exchanges it left

Design Decisions:
    - Clock injected: tests control timestamps, production uses utc_now
    - Threshold repair delegated to ExchangeMembershipEngine.deactivate_within so the
      threshold stays configured in one place
"""

import logging

from stockhub.core.domain_types import ChangeKind, EntityKind, StockId
from stockhub.core.enforce_fields import clean_description, clean_name
from stockhub.core.errors import DuplicateNameError, ErrorContext, ResourceNotFoundError
from stockhub.core.price_ledger import (
    Clock, PriceInput, normalize_price, ordered, record_price, utc_now,
)
from stockhub.core.projections import ChangeEvent, PriceEntry, StockView
from stockhub.core.repository_protocols import (
    NotificationSink, StoreTransaction, TransactionalStore,
)
from stockhub.services.exchange_membership import ExchangeMembershipEngine
from stockhub.services.notify import NullSink, publish_all

logger = logging.getLogger(__name__)


class StockLifecycleManager:
    """Creates, reprices, and deletes stocks."""

    def __init__(
        self,
        store: TransactionalStore,
        exchanges: ExchangeMembershipEngine,
        sink: NotificationSink | None = None,
        clock: Clock = utc_now,
    ):
        self._store = store
        self._exchanges = exchanges
        self._sink = sink or NullSink()
        self._clock = clock

    def list_all(self) -> list[StockView]:
        with self._store.transaction() as tx:
            return tx.stocks.list_all()

    def get(self, stock_id: StockId) -> StockView:
        with self._store.transaction() as tx:
            return _require(tx, stock_id)

    def create(
        self, name: str, description: str | None, initial_price: PriceInput,
    ) -> StockView:
        """Create a stock whose ledger opens with `initial_price`."""
        name = clean_name(name)
        description = clean_description(description)
        opening = record_price(initial_price, self._clock())
        with self._store.transaction() as tx:
            if tx.stocks.find_id_by_name(name) is not None:
                raise DuplicateNameError("Stock", name)
            view = tx.stocks.insert(name, description, opening)
        logger.info("Stock created", extra={"stock_id": view.id})
        publish_all(self._sink, [ChangeEvent.of_stock(ChangeKind.CREATED, view)])
        return view

    def update_price(self, stock_id: StockId, new_price: PriceInput) -> StockView:
        """Append a ledger entry and make it the current price."""
        price = normalize_price(new_price)
        now = self._clock()
        with self._store.transaction() as tx:
            current = _require(tx, stock_id)
            entry = record_price(price, now, after=current.last_update)
            view = tx.stocks.append_price(stock_id, entry)
        logger.info("Stock price updated", extra={"stock_id": stock_id})
        publish_all(self._sink, [ChangeEvent.of_stock(ChangeKind.UPDATED, view)])
        return view

    def get_price_history(
        self, stock_id: StockId, newest_first: bool = False,
    ) -> list[PriceEntry]:
        """The stock's ledger, oldest-first unless newest_first is set."""
        with self._store.transaction() as tx:
            _require(tx, stock_id)
            entries = tx.stocks.price_history(stock_id)
        return ordered(entries, newest_first=newest_first)

    def delete(self, stock_id: StockId) -> None:
        """Delete the stock, its ledger and memberships; repair affected exchanges."""
        with self._store.transaction() as tx:
            _require(tx, stock_id)
            affected = tx.exchanges.ids_containing(stock_id)
            tx.exchanges.remove_stock_everywhere(stock_id)
            tx.stocks.delete(stock_id)
            self._exchanges.deactivate_within(tx, affected)
            exchanges = [tx.exchanges.get(exchange_id) for exchange_id in affected]
        logger.info(
            "Stock deleted",
            extra={"stock_id": stock_id, "exchange_ids": affected},
        )
        events = [ChangeEvent.deleted(EntityKind.STOCK, stock_id)]
        events.extend(
            ChangeEvent.of_exchange(ChangeKind.UPDATED, view)
            for view in exchanges if view is not None
        )
        publish_all(self._sink, events)


def _require(tx: StoreTransaction, stock_id: StockId) -> StockView:
    view = tx.stocks.get(stock_id)
    if view is None:
        raise ResourceNotFoundError("Stock", stock_id, ErrorContext(stock_id=stock_id))
    return view
