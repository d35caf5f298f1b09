"""Exchange Routes — CRUD and membership management for exchanges.

Invariants:
    - Handlers are sync `def`, delegating straight to ExchangeMembershipEngine
    - Only fields present in the PUT body are forwarded to update()
"""

from fastapi import APIRouter, Depends, Response, status

from stockhub.api.dependencies import get_exchange_engine
from stockhub.core.domain_types import ExchangeId, StockId
from stockhub.schemas.exchange import (
    ExchangeCreate, ExchangeResponse, ExchangeUpdate, MembershipAdd,
)
from stockhub.services.exchange_membership import ExchangeMembershipEngine

router = APIRouter(prefix="/api/v1/exchanges", tags=["exchanges"])


@router.get("", response_model=list[ExchangeResponse])
def list_exchanges(
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
):
    """List all exchanges."""
    return [ExchangeResponse.from_view(v) for v in engine.list_all()]


@router.post(
    "", response_model=ExchangeResponse, status_code=status.HTTP_201_CREATED,
)
def create_exchange(
    body: ExchangeCreate,
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
):
    """Create an exchange (always empty; liveInMarket=true is rejected)."""
    view = engine.create(body.name, body.description, body.live_in_market)
    return ExchangeResponse.from_view(view)


@router.get("/{exchange_id}", response_model=ExchangeResponse)
def get_exchange(
    exchange_id: int,
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
):
    """Get exchange details."""
    return ExchangeResponse.from_view(engine.get(ExchangeId(exchange_id)))


@router.put("/{exchange_id}", response_model=ExchangeResponse)
def update_exchange(
    exchange_id: int,
    body: ExchangeUpdate,
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
):
    """Partial update of name, description and liveInMarket."""
    view = engine.update(
        ExchangeId(exchange_id),
        name=body.name,
        description=body.description,
        live_in_market=body.live_in_market,
    )
    return ExchangeResponse.from_view(view)


@router.delete("/{exchange_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exchange(
    exchange_id: int,
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
):
    """Delete an exchange; member stocks are kept."""
    engine.delete(ExchangeId(exchange_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{exchange_id}/stocks", response_model=ExchangeResponse)
def add_stock(
    exchange_id: int,
    body: MembershipAdd,
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
):
    """Link a stock to the exchange."""
    view = engine.add_member(ExchangeId(exchange_id), StockId(body.stock_id))
    return ExchangeResponse.from_view(view)


@router.delete("/{exchange_id}/stocks/{stock_id}", response_model=ExchangeResponse)
def remove_stock(
    exchange_id: int,
    stock_id: int,
    engine: ExchangeMembershipEngine = Depends(get_exchange_engine),
):
    """Unlink a stock; the exchange goes offline if it drops below the threshold."""
    view = engine.remove_member(ExchangeId(exchange_id), StockId(stock_id))
    return ExchangeResponse.from_view(view)
