"""SQL Store — SQLAlchemy implementations of the core repository protocols.

Invariants:
    - Every repository is bound to ONE Session, owned by a StoreTransaction; repositories
      never commit or roll back (DatabaseSessionManager.transaction() does)
    - Rows never leave this module: callers receive StockView/ExchangeView/PriceEntry
    - Membership reads and writes always hit exchange_members directly
    - Timestamps read back from the database are normalized to aware UTC
    - Every membership change touches the owning Exchange row, so the exchange version
      guards membership and live_in_market together

Design Decisions:
    - Stock UPDATE/DELETE go through the ORM unit of work so version_id_col guards them;
      membership changes are Core DML on the link table
    - deactivate_below loops over candidate exchanges instead of one UPDATE ... HAVING:
      an exchange whose last member was removed has no rows to GROUP BY and would be
      missed by the aggregate form
"""

from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from stockhub.core.domain_types import ExchangeId, StockId
from stockhub.core.errors import ResourceNotFoundError
from stockhub.core.price_ledger import as_utc
from stockhub.core.projections import ExchangeView, PriceEntry, StockView
from stockhub.models.exchange import Exchange
from stockhub.models.membership import exchange_members
from stockhub.models.price_history import PriceHistoryEntry
from stockhub.models.stock import Stock


def _stock_view(stock: Stock, exchange_ids: Iterable[int]) -> StockView:
    return StockView(
        id=StockId(stock.id),
        name=stock.name,
        description=stock.description,
        current_price=stock.current_price,
        last_update=as_utc(stock.last_update),
        exchange_ids=tuple(sorted(ExchangeId(i) for i in exchange_ids)),
    )


def _exchange_view(exchange: Exchange, stock_ids: Iterable[int]) -> ExchangeView:
    return ExchangeView(
        id=ExchangeId(exchange.id),
        name=exchange.name,
        description=exchange.description,
        live_in_market=exchange.live_in_market,
        stock_ids=tuple(sorted(StockId(i) for i in stock_ids)),
    )


class SqlStockRepository:
    """StockRepository over a SQLAlchemy Session."""

    def __init__(self, session: Session):
        self._session = session

    def list_all(self) -> list[StockView]:
        stocks = self._session.scalars(select(Stock).order_by(Stock.id)).all()
        links = self._session.execute(
            select(exchange_members.c.stock_id, exchange_members.c.exchange_id),
        ).all()
        by_stock: dict[int, list[int]] = defaultdict(list)
        for stock_id, exchange_id in links:
            by_stock[stock_id].append(exchange_id)
        return [_stock_view(s, by_stock.get(s.id, ())) for s in stocks]

    def get(self, stock_id: StockId) -> StockView | None:
        stock = self._session.get(Stock, stock_id)
        if stock is None:
            return None
        return _stock_view(stock, self._exchange_ids(stock_id))

    def find_id_by_name(self, name: str) -> StockId | None:
        found = self._session.scalar(select(Stock.id).where(Stock.name == name))
        return StockId(found) if found is not None else None

    def insert(
        self, name: str, description: str | None, opening: PriceEntry,
    ) -> StockView:
        stock = Stock(
            name=name,
            description=description,
            current_price=opening.price,
            last_update=opening.timestamp,
        )
        stock.price_history.append(
            PriceHistoryEntry(price=opening.price, timestamp=opening.timestamp),
        )
        self._session.add(stock)
        self._session.flush()
        return _stock_view(stock, ())

    def append_price(self, stock_id: StockId, entry: PriceEntry) -> StockView:
        stock = self._require(stock_id)
        self._session.add(PriceHistoryEntry(
            stock_id=stock.id, price=entry.price, timestamp=entry.timestamp,
        ))
        stock.current_price = entry.price
        stock.last_update = entry.timestamp
        self._session.flush()
        return _stock_view(stock, self._exchange_ids(stock_id))

    def price_history(self, stock_id: StockId) -> list[PriceEntry]:
        rows = self._session.scalars(
            select(PriceHistoryEntry)
            .where(PriceHistoryEntry.stock_id == stock_id)
            .order_by(PriceHistoryEntry.timestamp, PriceHistoryEntry.id),
        ).all()
        return [PriceEntry(price=r.price, timestamp=as_utc(r.timestamp)) for r in rows]

    def delete(self, stock_id: StockId) -> None:
        stock = self._require(stock_id)
        self._session.delete(stock)
        self._session.flush()

    def _exchange_ids(self, stock_id: StockId) -> list[int]:
        return list(self._session.scalars(
            select(exchange_members.c.exchange_id)
            .where(exchange_members.c.stock_id == stock_id),
        ).all())

    def _require(self, stock_id: StockId) -> Stock:
        stock = self._session.get(Stock, stock_id)
        if stock is None:
            raise ResourceNotFoundError("Stock", stock_id)
        return stock


class SqlExchangeRepository:
    """ExchangeRepository over a SQLAlchemy Session."""

    def __init__(self, session: Session):
        self._session = session

    def list_all(self) -> list[ExchangeView]:
        exchanges = self._session.scalars(
            select(Exchange).order_by(Exchange.id),
        ).all()
        links = self._session.execute(
            select(exchange_members.c.exchange_id, exchange_members.c.stock_id),
        ).all()
        by_exchange: dict[int, list[int]] = defaultdict(list)
        for exchange_id, stock_id in links:
            by_exchange[exchange_id].append(stock_id)
        return [_exchange_view(e, by_exchange.get(e.id, ())) for e in exchanges]

    def get(self, exchange_id: ExchangeId) -> ExchangeView | None:
        exchange = self._session.get(Exchange, exchange_id)
        if exchange is None:
            return None
        return _exchange_view(exchange, self._member_ids(exchange_id))

    def find_id_by_name(self, name: str) -> ExchangeId | None:
        found = self._session.scalar(
            select(Exchange.id).where(Exchange.name == name),
        )
        return ExchangeId(found) if found is not None else None

    def insert(
        self, name: str, description: str | None, live_in_market: bool,
    ) -> ExchangeView:
        exchange = Exchange(
            name=name,
            description=description,
            live_in_market=live_in_market,
            version=1,
        )
        self._session.add(exchange)
        self._session.flush()
        return _exchange_view(exchange, ())

    def update_fields(
        self,
        exchange_id: ExchangeId,
        name: str | None = None,
        description: str | None = None,
        live_in_market: bool | None = None,
    ) -> ExchangeView:
        exchange = self._require(exchange_id)
        if name is not None:
            exchange.name = name
        if description is not None:
            exchange.description = description
        if live_in_market is not None:
            exchange.live_in_market = live_in_market
        exchange.touch()
        self._session.flush()
        return _exchange_view(exchange, self._member_ids(exchange_id))

    def delete(self, exchange_id: ExchangeId) -> None:
        exchange = self._require(exchange_id)
        self._session.execute(
            delete(exchange_members)
            .where(exchange_members.c.exchange_id == exchange_id),
        )
        self._session.delete(exchange)
        self._session.flush()

    def ids_containing(self, stock_id: StockId) -> list[ExchangeId]:
        ids = self._session.scalars(
            select(exchange_members.c.exchange_id)
            .where(exchange_members.c.stock_id == stock_id)
            .order_by(exchange_members.c.exchange_id),
        ).all()
        return [ExchangeId(i) for i in ids]

    def count_members(self, exchange_id: ExchangeId) -> int:
        return self._session.scalar(
            select(func.count())
            .select_from(exchange_members)
            .where(exchange_members.c.exchange_id == exchange_id),
        ) or 0

    def has_member(self, exchange_id: ExchangeId, stock_id: StockId) -> bool:
        found = self._session.scalar(
            select(exchange_members.c.stock_id).where(
                exchange_members.c.exchange_id == exchange_id,
                exchange_members.c.stock_id == stock_id,
            ),
        )
        return found is not None

    def add_member(self, exchange_id: ExchangeId, stock_id: StockId) -> None:
        self._session.execute(
            insert(exchange_members).values(
                exchange_id=exchange_id, stock_id=stock_id,
            ),
        )
        self._require(exchange_id).touch()

    def remove_member(self, exchange_id: ExchangeId, stock_id: StockId) -> bool:
        result = self._session.execute(
            delete(exchange_members).where(
                exchange_members.c.exchange_id == exchange_id,
                exchange_members.c.stock_id == stock_id,
            ),
        )
        if result.rowcount == 0:
            return False
        self._require(exchange_id).touch()
        return True

    def remove_stock_everywhere(self, stock_id: StockId) -> None:
        for exchange_id in self.ids_containing(stock_id):
            self._require(exchange_id).touch()
        self._session.execute(
            delete(exchange_members)
            .where(exchange_members.c.stock_id == stock_id),
        )

    def deactivate_below(
        self, exchange_ids: list[ExchangeId], threshold: int,
    ) -> list[ExchangeId]:
        if not exchange_ids:
            return []
        live = self._session.scalars(
            select(Exchange)
            .where(Exchange.id.in_(set(exchange_ids)))
            .where(Exchange.live_in_market.is_(True))
            .order_by(Exchange.id),
        ).all()
        flipped: list[ExchangeId] = []
        for exchange in live:
            if self.count_members(ExchangeId(exchange.id)) < threshold:
                exchange.live_in_market = False
                exchange.touch()
                flipped.append(ExchangeId(exchange.id))
        self._session.flush()
        return flipped

    def _member_ids(self, exchange_id: ExchangeId) -> list[int]:
        return list(self._session.scalars(
            select(exchange_members.c.stock_id)
            .where(exchange_members.c.exchange_id == exchange_id),
        ).all())

    def _require(self, exchange_id: ExchangeId) -> Exchange:
        exchange = self._session.get(Exchange, exchange_id)
        if exchange is None:
            raise ResourceNotFoundError("Exchange", exchange_id)
        return exchange


class SqlStoreTransaction:
    """StoreTransaction — both repositories sharing one Session."""

    def __init__(self, session: Session):
        self.session = session
        self.stocks = SqlStockRepository(session)
        self.exchanges = SqlExchangeRepository(session)
