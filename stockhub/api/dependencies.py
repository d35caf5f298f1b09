"""Route Dependencies — builds services from the process-wide store and broadcaster.

Invariants:
    - Services are constructed per request; they hold no state between calls
    - The live threshold comes from settings, injected once into the engine
"""

from fastapi import Depends

from stockhub.config import get_settings
from stockhub.infrastructure.broadcast import EventBroadcaster, get_broadcaster
from stockhub.infrastructure.database import DatabaseSessionManager, get_store
from stockhub.services.exchange_membership import ExchangeMembershipEngine
from stockhub.services.stock_lifecycle import StockLifecycleManager


def get_exchange_engine(
    store: DatabaseSessionManager = Depends(get_store),
    sink: EventBroadcaster = Depends(get_broadcaster),
) -> ExchangeMembershipEngine:
    return ExchangeMembershipEngine(
        store, threshold=get_settings().live_threshold, sink=sink,
    )


def get_stock_manager(
    store: DatabaseSessionManager = Depends(get_store),
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
    sink: EventBroadcaster = Depends(get_broadcaster),
) -> StockLifecycleManager:
    return StockLifecycleManager(store, engine, sink=sink)
