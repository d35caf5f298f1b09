"""Exchange Schemas — Pydantic models for exchange and membership endpoints.

Invariants:
    - ExchangeCreate.name: stripped, non-blank; liveInMarket defaults to False
    - ExchangeUpdate: every field optional — absent or null means "leave unchanged"
    - MembershipAdd.stockId is required
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockhub.core.domain_types import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH
from stockhub.core.projections import ExchangeView

_CAMEL = ConfigDict(populate_by_name=True)


def _strip_required(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class ExchangeCreate(BaseModel):
    """Exchange creation — a new exchange always starts with zero members."""
    model_config = _CAMEL

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    live_in_market: bool = Field(False, alias="liveInMarket")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v)


class ExchangeUpdate(BaseModel):
    """Partial exchange update."""
    model_config = _CAMEL

    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    live_in_market: bool | None = Field(None, alias="liveInMarket")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return _strip_required(v)


class MembershipAdd(BaseModel):
    """Add-member request body."""
    model_config = _CAMEL

    stock_id: int = Field(alias="stockId", ge=1)


class ExchangeResponse(BaseModel):
    """Exchange response — public-facing exchange data."""
    model_config = _CAMEL

    id: int
    name: str
    description: str | None = None
    live_in_market: bool = Field(serialization_alias="liveInMarket")
    stock_ids: list[int] = Field(
        default_factory=list, serialization_alias="stockIds",
    )

    @classmethod
    def from_view(cls, view: ExchangeView) -> "ExchangeResponse":
        return cls(
            id=view.id,
            name=view.name,
            description=view.description,
            live_in_market=view.live_in_market,
            stock_ids=list(view.stock_ids),
        )
