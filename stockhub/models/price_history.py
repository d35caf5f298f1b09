"""PriceHistoryEntry ORM — one immutable row of a stock's append-only price ledger.

Invariants:
    - Always belongs to a Stock (stock_id FK, ON DELETE CASCADE)
    - Rows are inserted, never updated; ledger order is (timestamp, id)

Design Decisions:
    - Index on (stock_id, timestamp): history reads are always per stock, time-ordered
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockhub.core.domain_types import PRICE_PRECISION, PRICE_SCALE
from stockhub.db.base import Base


class PriceHistoryEntry(Base):
    """Price ledger entry — price observed at a UTC instant."""
    __tablename__ = "stock_price_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stock_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stocks.id", ondelete="CASCADE"), nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(PRICE_PRECISION, PRICE_SCALE), nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    # Relationships
    stock: Mapped["Stock"] = relationship(
        "Stock", back_populates="price_history",
    )

    __table_args__ = (
        Index("ix_stock_price_history_stock_ts", "stock_id", "timestamp"),
    )
