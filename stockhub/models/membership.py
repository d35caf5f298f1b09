"""Membership Table — many-to-many link between exchanges and stocks.

Invariants:
    - (exchange_id, stock_id) is the primary key: a stock is linked at most once
    - Deleting either side removes its rows (ON DELETE CASCADE); the store also deletes
      them explicitly so SQLite without foreign_keys=ON behaves the same

Design Decisions:
    - Plain Table, not a mapped class: the link carries no attributes
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, Table

from stockhub.db.base import Base


exchange_members = Table(
    "exchange_members",
    Base.metadata,
    Column(
        "exchange_id", Integer,
        ForeignKey("exchanges.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "stock_id", Integer,
        ForeignKey("stocks.id", ondelete="CASCADE"), primary_key=True,
    ),
    Index("ix_exchange_members_stock_id", "stock_id"),
)
