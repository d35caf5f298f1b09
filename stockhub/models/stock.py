"""Stock ORM — persists a tradable instrument and owns its price ledger.

Invariants:
    - name is unique and non-nullable
    - current_price/last_update always mirror the newest PriceHistoryEntry
    - version is the optimistic concurrency token: every UPDATE checks and bumps it

Design Decisions:
    - version_id_col: SQLAlchemy adds "WHERE version = :old" to each UPDATE and raises
      StaleDataError when no row matched; the store maps that to ConcurrencyError
    - price_history cascade delete-orphan: entries are exclusively owned by the stock
    - No relationship to Exchange: membership lives in exchange_members only
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockhub.core.domain_types import (
    DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, PRICE_PRECISION, PRICE_SCALE,
)
from stockhub.db.base import Base


class Stock(Base):
    """Stock entity — a named instrument with a current price."""
    __tablename__ = "stocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH), nullable=False, unique=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True,
    )
    current_price: Mapped[Decimal] = mapped_column(
        Numeric(PRICE_PRECISION, PRICE_SCALE), nullable=False,
    )
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    price_history: Mapped[list["PriceHistoryEntry"]] = relationship(
        "PriceHistoryEntry", back_populates="stock",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}
