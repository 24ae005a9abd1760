from __future__ import annotations

from typing import Any

import httpx
import pytest

from app.services.coingecko import CoinGeckoClient


BASE_URL = "https://api.coingecko.com/api/v3"


def make_coin(
    coin_id: str,
    change_24h: float | None = None,
    change_7d: float | None = None,
    change_30d: float | None = None,
    price: float = 1.0,
    symbol: str | None = None,
) -> dict[str, Any]:
    return {
        "id": coin_id,
        "name": coin_id.title(),
        "symbol": symbol if symbol is not None else coin_id[:3],
        "current_price": price,
        "market_cap": price * 1_000_000,
        "price_change_percentage_24h_in_currency": change_24h,
        "price_change_percentage_7d_in_currency": change_7d,
        "price_change_percentage_30d_in_currency": change_30d,
    }


def _resource_for(path: str) -> str:
    path = path.removeprefix("/api/v3")
    if path == "/coins/markets":
        return "markets"
    if path == "/search/trending":
        return "trending"
    if path == "/global":
        return "global"
    if path == "/simple/price":
        return "simple-price"
    if path.startswith("/coins/") and path.endswith("/tickers"):
        return "tickers"
    return "unknown"


class FakeCoinGecko:
    """Canned CoinGecko responses served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.bodies: dict[str, Any] = {
            "markets": [
                make_coin("bitcoin", 2.0, 1.0, 10.0, price=60000.0, symbol="btc"),
                make_coin("ethereum", -1.0, 3.0, 5.0, price=3000.0, symbol="eth"),
                make_coin("solana", 0.5, -1.0, None, price=150.0, symbol="sol"),
            ],
            "trending": {"coins": [{"item": {"id": "pepe"}}, {"item": {"id": "solana"}}]},
            "global": {"data": {"market_cap_change_percentage_24h_usd": 1.0}},
            "simple-price": {"bitcoin": {"usd": 60000.0, "eur": 55000.0, "gbp": 47000.0}},
            "tickers": {"tickers": []},
        }
        self.statuses: dict[str, int] = {}
        self.broken: set[str] = set()
        self.calls: list[httpx.Request] = []

    def calls_for(self, resource: str) -> list[httpx.Request]:
        return [r for r in self.calls if _resource_for(r.url.path) == resource]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        resource = _resource_for(request.url.path)

        if resource in self.broken:
            raise httpx.ConnectError("connection refused", request=request)

        status = self.statuses.get(resource, 200)
        if status != 200:
            return httpx.Response(status, json={"error": "upstream"})
        return httpx.Response(200, json=self.bodies.get(resource))

    def client(self) -> CoinGeckoClient:
        http_client = httpx.AsyncClient(
            base_url=BASE_URL,
            transport=httpx.MockTransport(self.handler),
        )
        return CoinGeckoClient(http_client=http_client)


@pytest.fixture()
def fake_coingecko() -> FakeCoinGecko:
    return FakeCoinGecko()
