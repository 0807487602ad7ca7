"""Pydantic schemas for the payloads sent by the upstream data feeds."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CoinRecord(BaseModel):
    """One entry of the coin-data list."""

    coin_id: str = Field(..., alias="CoinId")
    standard_price: str = Field(..., alias="StandardPrice")


class CoinDataResponse(BaseModel):
    """Body returned by the coin-data list endpoint."""

    code: Optional[int] = None
    message: Optional[str] = None
    data: List[CoinRecord] = Field(default_factory=list)


class MarkPriceUpdate(BaseModel):
    """A ``<symbol>@markPrice`` stream event."""

    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E", description="Event time in milliseconds.")
    symbol: str = Field(..., alias="s")
    mark_price: str = Field(..., alias="p")
    funding_rate: str = Field(..., alias="r")
    settlement_time: int = Field(0, alias="T", description="Next funding time in milliseconds.")
