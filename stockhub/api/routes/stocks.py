"""Stock Routes — CRUD, price updates and price history for stocks.

Invariants:
    - Handlers are sync `def`: FastAPI runs them in its threadpool, matching the
      synchronous services
    - Domain errors propagate to the global StockhubError handler (no try/except here)
    - Change notifications are published by the services, after commit
"""

from enum import Enum

from fastapi import APIRouter, Depends, Query, Response, status

from stockhub.api.dependencies import get_stock_manager
from stockhub.core.domain_types import StockId
from stockhub.schemas.stock import (
    PriceHistoryItem, PriceUpdate, StockCreate, StockResponse,
)
from stockhub.services.stock_lifecycle import StockLifecycleManager

router = APIRouter(prefix="/api/v1/stocks", tags=["stocks"])


class HistoryOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@router.get("", response_model=list[StockResponse])
def list_stocks(manager: StockLifecycleManager = Depends(get_stock_manager)):
    """List all stocks."""
    return [StockResponse.from_view(v) for v in manager.list_all()]


@router.post(
    "", response_model=StockResponse, status_code=status.HTTP_201_CREATED,
)
def create_stock(
    body: StockCreate,
    manager: StockLifecycleManager = Depends(get_stock_manager),
):
    """Create a stock; its price history opens with currentPrice."""
    view = manager.create(body.name, body.description, body.current_price)
    return StockResponse.from_view(view)


@router.get("/{stock_id}", response_model=StockResponse)
def get_stock(
    stock_id: int, manager: StockLifecycleManager = Depends(get_stock_manager),
):
    """Get stock details."""
    return StockResponse.from_view(manager.get(StockId(stock_id)))


@router.put("/{stock_id}/price", response_model=StockResponse)
def update_price(
    stock_id: int,
    body: PriceUpdate,
    manager: StockLifecycleManager = Depends(get_stock_manager),
):
    """Record a new price. A 409 with retryable=true means a concurrent update won."""
    view = manager.update_price(StockId(stock_id), body.current_price)
    return StockResponse.from_view(view)


@router.get("/{stock_id}/history", response_model=list[PriceHistoryItem])
def get_price_history(
    stock_id: int,
    order: HistoryOrder = Query(HistoryOrder.ASC),
    manager: StockLifecycleManager = Depends(get_stock_manager),
):
    """Price history, oldest-first by default."""
    entries = manager.get_price_history(
        StockId(stock_id), newest_first=order is HistoryOrder.DESC,
    )
    return [PriceHistoryItem.from_entry(e) for e in entries]


@router.delete("/{stock_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stock(
    stock_id: int, manager: StockLifecycleManager = Depends(get_stock_manager),
):
    """Delete a stock, its history and memberships."""
    manager.delete(StockId(stock_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
