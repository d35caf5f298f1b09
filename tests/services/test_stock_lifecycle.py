"""Stock Lifecycle — service tests for stock CRUD and the price ledger.

Tests cover:
    - create opens the ledger with exactly one entry at the initial price
    - update_price appends one entry and mirrors it into current price
    - history is oldest-first, newest-first is its exact reverse
    - validation and not-found errors leave the ledger untouched
    - delete removes the stock, its ledger and memberships; repairs exchanges
    - change events are published after commit; a failing sink never undoes a write
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stockhub.core.errors import (
    DuplicateNameError, FieldValidationError, PriceValidationError,
    ResourceNotFoundError,
)
from stockhub.services.stock_lifecycle import StockLifecycleManager

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ─── create ──────────────────────────────────────────────────────

def test_create_opens_ledger_with_initial_price(stocks):
    stock = stocks.create("ACME", "Widgets", Decimal("100.5"))
    assert stock.current_price == Decimal("100.5000")
    assert stock.last_update == T0
    assert stock.exchange_ids == ()

    history = stocks.get_price_history(stock.id)
    assert len(history) == 1
    assert history[0].price == Decimal("100.5000")
    assert history[0].timestamp == stock.last_update


def test_create_strips_name(stocks):
    assert stocks.create("  ACME ", None, "1").name == "ACME"


def test_create_duplicate_name_conflicts(stocks):
    stocks.create("ACME", None, "1")
    with pytest.raises(DuplicateNameError):
        stocks.create("ACME", None, "2")
    assert len(stocks.list_all()) == 1


@pytest.mark.parametrize("price", ["0", "-3", "abc"])
def test_create_rejects_bad_price(stocks, price):
    with pytest.raises(PriceValidationError):
        stocks.create("ACME", None, price)
    assert stocks.list_all() == []


def test_create_rejects_blank_name(stocks):
    with pytest.raises(FieldValidationError):
        stocks.create("   ", None, "1")


# ─── update_price ────────────────────────────────────────────────

def test_update_price_appends_one_entry(stocks):
    stock = stocks.create("ACME", None, "100")
    updated = stocks.update_price(stock.id, "105.25")

    assert updated.current_price == Decimal("105.2500")
    assert updated.last_update > stock.last_update
    history = stocks.get_price_history(stock.id)
    assert [e.price for e in history] == [Decimal("100.0000"), Decimal("105.2500")]
    assert history[-1].timestamp == updated.last_update


def test_update_price_same_value_still_appends(stocks):
    stock = stocks.create("ACME", None, "100")
    stocks.update_price(stock.id, "100")
    assert len(stocks.get_price_history(stock.id)) == 2


def test_update_price_rejects_non_positive_without_touching_ledger(stocks):
    stock = stocks.create("ACME", None, "100")
    with pytest.raises(PriceValidationError):
        stocks.update_price(stock.id, "0")
    assert stocks.get(stock.id).current_price == Decimal("100.0000")
    assert len(stocks.get_price_history(stock.id)) == 1


def test_update_price_unknown_stock(stocks):
    with pytest.raises(ResourceNotFoundError):
        stocks.update_price(999, "1")


def test_update_price_with_clock_stepping_backwards(store, engine, sink, step_clock):
    clock = step_clock(T0, step=timedelta(seconds=-1))
    manager = StockLifecycleManager(store, engine, sink=sink, clock=clock)
    stock = manager.create("ACME", None, "1")
    manager.update_price(stock.id, "2")
    manager.update_price(stock.id, "3")

    history = manager.get_price_history(stock.id)
    assert [e.price for e in history] == [Decimal("1"), Decimal("2"), Decimal("3")]
    assert all(e.timestamp == T0 for e in history)
    assert manager.get(stock.id).current_price == Decimal("3")


# ─── history ─────────────────────────────────────────────────────

def test_history_orders_both_ways(stocks):
    stock = stocks.create("ACME", None, "1")
    for price in ("2", "3", "4"):
        stocks.update_price(stock.id, price)

    oldest_first = stocks.get_price_history(stock.id)
    newest_first = stocks.get_price_history(stock.id, newest_first=True)
    assert [e.price for e in oldest_first] == [Decimal(p) for p in "1234"]
    assert newest_first == list(reversed(oldest_first))
    timestamps = [e.timestamp for e in oldest_first]
    assert timestamps == sorted(timestamps)


def test_history_unknown_stock_not_found(stocks):
    with pytest.raises(ResourceNotFoundError):
        stocks.get_price_history(12345)


# ─── reads ───────────────────────────────────────────────────────

def test_get_unknown_stock(stocks):
    with pytest.raises(ResourceNotFoundError) as exc:
        stocks.get(7)
    assert exc.value.context.stock_id == 7


def test_get_reports_exchange_membership(stocks, engine):
    stock = stocks.create("ACME", None, "1")
    a = engine.create("A")
    b = engine.create("B")
    engine.add_member(b.id, stock.id)
    engine.add_member(a.id, stock.id)
    assert stocks.get(stock.id).exchange_ids == (a.id, b.id)


def test_list_all_in_id_order(stocks):
    ids = [stocks.create(name, None, "1").id for name in ("C", "A", "B")]
    assert [s.id for s in stocks.list_all()] == ids


# ─── delete ──────────────────────────────────────────────────────

def test_delete_removes_stock_and_history(stocks):
    stock = stocks.create("ACME", None, "1")
    stocks.update_price(stock.id, "2")
    stocks.delete(stock.id)

    with pytest.raises(ResourceNotFoundError):
        stocks.get(stock.id)
    with pytest.raises(ResourceNotFoundError):
        stocks.get_price_history(stock.id)


def test_delete_unknown_stock(stocks):
    with pytest.raises(ResourceNotFoundError):
        stocks.delete(1)


def test_delete_name_becomes_reusable(stocks):
    stock = stocks.create("ACME", None, "1")
    stocks.delete(stock.id)
    assert stocks.create("ACME", None, "1").name == "ACME"


def test_delete_deactivates_exchange_at_threshold(stocks, engine, live_exchange):
    exchange = live_exchange("EX10", 10)
    assert exchange.live_in_market

    stocks.delete(exchange.stock_ids[0])

    after = engine.get(exchange.id)
    assert after.member_count == 9
    assert after.live_in_market is False


def test_delete_keeps_large_exchange_live(stocks, engine, live_exchange):
    big = live_exchange("EX50", 50)
    small = live_exchange("EX10", 10)
    shared = small.stock_ids[0]
    engine.add_member(big.id, shared)

    stocks.delete(shared)

    assert engine.get(big.id).live_in_market is True
    assert engine.get(big.id).member_count == 50
    assert engine.get(small.id).live_in_market is False


def test_delete_leaves_unrelated_exchanges(stocks, engine, live_exchange, make_stocks):
    exchange = live_exchange("EX10", 10)
    (loner,) = make_stocks(1, prefix="loner")
    stocks.delete(loner)
    assert engine.get(exchange.id).live_in_market is True


# ─── notifications ───────────────────────────────────────────────

def test_events_published_in_order(stocks, engine, sink):
    stock = stocks.create("ACME", None, "1")
    exchange = engine.create("EX")
    engine.add_member(exchange.id, stock.id)
    sink.events.clear()

    stocks.update_price(stock.id, "2")
    stocks.delete(stock.id)

    assert sink.kinds() == ["stock.updated", "stock.deleted", "exchange.updated"]
    assert sink.events[1].payload == {"id": stock.id}
    assert sink.events[2].payload["stockIds"] == []


def test_failed_operation_publishes_nothing(stocks, sink):
    with pytest.raises(PriceValidationError):
        stocks.create("ACME", None, "0")
    assert sink.events == []


def test_failing_sink_never_undoes_commit(store, engine, clock, failing_sink):
    manager = StockLifecycleManager(store, engine, sink=failing_sink, clock=clock)
    stock = manager.create("ACME", None, "1")
    manager.update_price(stock.id, "2")
    assert manager.get(stock.id).current_price == Decimal("2")
