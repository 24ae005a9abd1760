"""Pydantic models for the market-overview and coin-tickers responses."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TrendingEntry(BaseModel):
    id: Any


class AdjacentStates(BaseModel):
    prev: Optional[str] = None
    next: Optional[str] = None


class Mood(_CamelModel):
    """Heuristic mood; `metrics` is empty when there were no coins to score."""

    state: str
    label: str
    score: Optional[int] = Field(None, ge=0, le=100)
    metrics: Dict[str, Optional[float]] = Field(default_factory=dict)
    adjacent: AdjacentStates = Field(default_factory=AdjacentStates)
    ghost_key: str = Field(..., alias="ghostKey")


class Top3Entry(_CamelModel):
    # id, name and symbol are copied from the listing row as-is
    id: Any
    name: Any = None
    symbol: Any = None
    price_usd: Optional[float] = Field(None, alias="priceUsd")
    change_24h_pct: Optional[float] = Field(None, alias="change24hPct")
    change_30d_pct: Optional[float] = Field(None, alias="change30dPct")
    market_cap_usd: Optional[float] = Field(None, alias="marketCapUsd")


class CoinRow(_CamelModel):
    id: Any
    symbol: str
    name: Any = None
    price_usd: Optional[float] = Field(None, alias="priceUsd")
    chg_24h: Optional[float] = Field(None, alias="chg24h")
    chg_30d: Optional[float] = Field(None, alias="chg30d")


class MarketOverviewResponse(_CamelModel):
    """
    Aggregate payload. `markets`, `global` and `converterPrices` are CoinGecko
    passthrough and are not narrowed.
    """

    markets: List[Dict[str, Any]]
    trending: List[TrendingEntry]
    global_stats: Any = Field(None, alias="global")
    converter_prices: Dict[str, Any] = Field(..., alias="converterPrices")
    mood: Mood
    top3_snapshot: List[Top3Entry] = Field(..., alias="top3Snapshot")
    coins: List[CoinRow]
    source: Literal["live", "cache", "stale-cache"]


class TickerRow(BaseModel):
    exchange: str
    pair: str
    price: float
    volume: float


class CoinTickersResponse(BaseModel):
    coin: str
    tickers: List[TickerRow]
    source: Literal["live-or-cache"] = "live-or-cache"
