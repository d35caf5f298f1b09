"""Stock Schemas — Pydantic models with field-level validation for stock endpoints.

Invariants:
    - StockCreate.name: stripped, 1-255 chars, non-blank
    - Prices are Decimals strictly greater than 0 with at most 4 fractional digits
    - Responses serialize camelCase (currentPrice, lastUpdate, exchangeIds)

Design Decisions:
    - Decimal over float: the ledger is fixed-point, JSON carries prices as strings
    - populate_by_name: tests and internal callers may use snake_case field names
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockhub.core.domain_types import (
    DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, PRICE_PRECISION, PRICE_SCALE,
)
from stockhub.core.projections import PriceEntry, StockView

_CAMEL = ConfigDict(populate_by_name=True)


class StockCreate(BaseModel):
    """Stock creation — validates name, description and opening price."""
    model_config = _CAMEL

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    current_price: Decimal = Field(
        alias="currentPrice", gt=0,
        max_digits=PRICE_PRECISION, decimal_places=PRICE_SCALE,
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class PriceUpdate(BaseModel):
    """Price update — new price must be strictly positive."""
    model_config = _CAMEL

    current_price: Decimal = Field(
        alias="currentPrice", gt=0,
        max_digits=PRICE_PRECISION, decimal_places=PRICE_SCALE,
    )


class StockResponse(BaseModel):
    """Stock response — public-facing stock data."""
    model_config = _CAMEL

    id: int
    name: str
    description: str | None = None
    current_price: Decimal = Field(serialization_alias="currentPrice")
    last_update: datetime = Field(serialization_alias="lastUpdate")
    exchange_ids: list[int] = Field(
        default_factory=list, serialization_alias="exchangeIds",
    )

    @classmethod
    def from_view(cls, view: StockView) -> "StockResponse":
        return cls(
            id=view.id,
            name=view.name,
            description=view.description,
            current_price=view.current_price,
            last_update=view.last_update,
            exchange_ids=list(view.exchange_ids),
        )


class PriceHistoryItem(BaseModel):
    """One price-ledger entry."""
    price: Decimal
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: PriceEntry) -> "PriceHistoryItem":
        return cls(price=entry.price, timestamp=entry.timestamp)
