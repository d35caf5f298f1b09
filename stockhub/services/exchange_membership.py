"""Exchange Membership Engine — exchange CRUD, membership links, and the live threshold.

Invariants:
    - live_in_market == True implies member_count >= threshold at every commit
    - NOT_LIVE -> LIVE only through update(live_in_market=True) while the guard holds;
      adding members never raises the flag
    - LIVE -> NOT_LIVE through update(live_in_market=False), remove_member repair, or
      deactivate_below_threshold — repairs never reject the triggering operation
    - remove_member and its repair commit together (one transaction)
    - add_member reports a missing exchange or stock as MembershipTargetMissingError
      (business-rule kind); remove_member reports them as ResourceNotFoundError
    - The member count behind a go-live decision is protected by the exchange version:
      a membership change committed in between makes the decision fail with
      ConcurrencyError instead of committing a live exchange below threshold

Design Decisions:
    - threshold injected once at construction (settings.live_threshold) instead of
      literals at each call site
    - deactivate_within() runs inside a caller's transaction so stock deletion can repair
      exchanges atomically with the delete
"""

import logging
from collections.abc import Iterable

from stockhub.core.domain_types import (
    LIVE_THRESHOLD, ChangeKind, EntityKind, ExchangeId, StockId,
)
from stockhub.core.enforce_fields import clean_description, clean_name
from stockhub.core.enforce_membership import check_live_request, needs_deactivation
from stockhub.core.errors import (
    DuplicateMembershipError, DuplicateNameError, ErrorContext,
    MembershipTargetMissingError, ResourceNotFoundError,
)
from stockhub.core.projections import ChangeEvent, ExchangeView
from stockhub.core.repository_protocols import (
    NotificationSink, StoreTransaction, TransactionalStore,
)
from stockhub.services.notify import NullSink, publish_all

logger = logging.getLogger(__name__)


class ExchangeMembershipEngine:
    """Exchange lifecycle and membership with the live-in-market guard."""

    def __init__(
        self,
        store: TransactionalStore,
        threshold: int = LIVE_THRESHOLD,
        sink: NotificationSink | None = None,
    ):
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        self._store = store
        self._threshold = threshold
        self._sink = sink or NullSink()

    @property
    def threshold(self) -> int:
        return self._threshold

    # ─── Reads ───────────────────────────────────────────────────

    def list_all(self) -> list[ExchangeView]:
        with self._store.transaction() as tx:
            return tx.exchanges.list_all()

    def get(self, exchange_id: ExchangeId) -> ExchangeView:
        with self._store.transaction() as tx:
            return _require(tx, exchange_id)

    # ─── Exchange lifecycle ──────────────────────────────────────

    def create(
        self,
        name: str,
        description: str | None = None,
        live_in_market: bool = False,
    ) -> ExchangeView:
        """Create an exchange with zero members; it can never start live."""
        name = clean_name(name)
        description = clean_description(description)
        error = check_live_request(live_in_market, 0, self._threshold)
        if error:
            raise error
        with self._store.transaction() as tx:
            if tx.exchanges.find_id_by_name(name) is not None:
                raise DuplicateNameError("Exchange", name)
            view = tx.exchanges.insert(name, description, live_in_market)
        logger.info("Exchange created", extra={"exchange_id": view.id})
        publish_all(self._sink, [ChangeEvent.of_exchange(ChangeKind.CREATED, view)])
        return view

    def update(
        self,
        exchange_id: ExchangeId,
        name: str | None = None,
        description: str | None = None,
        live_in_market: bool | None = None,
    ) -> ExchangeView:
        """Partial update: only non-None fields change."""
        if name is not None:
            name = clean_name(name)
        description = clean_description(description)
        with self._store.transaction() as tx:
            current = _require(tx, exchange_id)
            if name is not None and name != current.name:
                if tx.exchanges.find_id_by_name(name) is not None:
                    raise DuplicateNameError(
                        "Exchange", name, ErrorContext(exchange_id=exchange_id),
                    )
            if live_in_market is not None:
                error = check_live_request(
                    live_in_market,
                    tx.exchanges.count_members(exchange_id),
                    self._threshold,
                )
                if error:
                    error.context.exchange_id = exchange_id
                    raise error
            view = tx.exchanges.update_fields(
                exchange_id,
                name=name,
                description=description,
                live_in_market=live_in_market,
            )
        logger.info("Exchange updated", extra={"exchange_id": exchange_id})
        publish_all(self._sink, [ChangeEvent.of_exchange(ChangeKind.UPDATED, view)])
        return view

    def delete(self, exchange_id: ExchangeId) -> None:
        """Remove the exchange and its membership rows; member stocks are untouched."""
        with self._store.transaction() as tx:
            _require(tx, exchange_id)
            tx.exchanges.delete(exchange_id)
        logger.info("Exchange deleted", extra={"exchange_id": exchange_id})
        publish_all(
            self._sink, [ChangeEvent.deleted(EntityKind.EXCHANGE, exchange_id)],
        )

    # ─── Membership ──────────────────────────────────────────────

    def add_member(self, exchange_id: ExchangeId, stock_id: StockId) -> ExchangeView:
        """Link a stock; never changes live_in_market."""
        context = ErrorContext(exchange_id=exchange_id, stock_id=stock_id)
        with self._store.transaction() as tx:
            if tx.exchanges.get(exchange_id) is None:
                raise MembershipTargetMissingError("Exchange", context)
            if tx.stocks.get(stock_id) is None:
                raise MembershipTargetMissingError("Stock", context)
            if tx.exchanges.has_member(exchange_id, stock_id):
                raise DuplicateMembershipError(context)
            tx.exchanges.add_member(exchange_id, stock_id)
            view = _require(tx, exchange_id)
        logger.info(
            "Stock added to exchange",
            extra={"exchange_id": exchange_id, "stock_id": stock_id},
        )
        publish_all(self._sink, [ChangeEvent.of_exchange(ChangeKind.UPDATED, view)])
        return view

    def remove_member(
        self, exchange_id: ExchangeId, stock_id: StockId,
    ) -> ExchangeView:
        """Unlink a stock, repairing live_in_market in the same transaction."""
        with self._store.transaction() as tx:
            current = _require(tx, exchange_id)
            if not tx.exchanges.remove_member(exchange_id, stock_id):
                raise ResourceNotFoundError(
                    "Stock", stock_id,
                    ErrorContext(exchange_id=exchange_id, stock_id=stock_id),
                    message="Stock not linked to exchange",
                )
            remaining = tx.exchanges.count_members(exchange_id)
            if needs_deactivation(current.live_in_market, remaining, self._threshold):
                tx.exchanges.update_fields(exchange_id, live_in_market=False)
                logger.info(
                    "Exchange dropped below live threshold; deactivated",
                    extra={"exchange_id": exchange_id},
                )
            view = _require(tx, exchange_id)
        logger.info(
            "Stock removed from exchange",
            extra={"exchange_id": exchange_id, "stock_id": stock_id},
        )
        publish_all(self._sink, [ChangeEvent.of_exchange(ChangeKind.UPDATED, view)])
        return view

    # ─── Threshold repair ────────────────────────────────────────

    def deactivate_below_threshold(
        self, exchange_ids: Iterable[ExchangeId], threshold: int | None = None,
    ) -> list[ExchangeId]:
        """Set live_in_market=False on every listed exchange below threshold.

        Empty input is a no-op, unknown ids are skipped, and repeating the call
        changes nothing. Returns the ids whose flag actually flipped.
        """
        ids = sorted(set(exchange_ids))
        if not ids:
            return []
        with self._store.transaction() as tx:
            flipped = self.deactivate_within(tx, ids, threshold)
            views = [_require(tx, exchange_id) for exchange_id in flipped]
        publish_all(
            self._sink,
            [ChangeEvent.of_exchange(ChangeKind.UPDATED, v) for v in views],
        )
        return flipped

    def deactivate_within(
        self,
        tx: StoreTransaction,
        exchange_ids: Iterable[ExchangeId],
        threshold: int | None = None,
    ) -> list[ExchangeId]:
        """Threshold repair inside an already-open transaction (no commit, no events)."""
        ids = sorted(set(exchange_ids))
        if not ids:
            return []
        limit = self._threshold if threshold is None else threshold
        flipped = tx.exchanges.deactivate_below(ids, limit)
        if flipped:
            logger.info(
                "Exchanges below live threshold deactivated",
                extra={"exchange_ids": flipped},
            )
        return flipped


def _require(tx: StoreTransaction, exchange_id: ExchangeId) -> ExchangeView:
    view = tx.exchanges.get(exchange_id)
    if view is None:
        raise ResourceNotFoundError(
            "Exchange", exchange_id, ErrorContext(exchange_id=exchange_id),
        )
    return view
