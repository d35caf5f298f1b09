"""ORM Models — SQLAlchemy declarative models for stocks, exchanges, and the price ledger.

Invariants:
    - All models inherit from Base (db/base.py)
    - Membership is its own table, owned by neither Stock nor Exchange

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from stockhub.models.stock import Stock  # noqa: F401
from stockhub.models.exchange import Exchange  # noqa: F401
from stockhub.models.price_history import PriceHistoryEntry  # noqa: F401
from stockhub.models.membership import exchange_members  # noqa: F401
