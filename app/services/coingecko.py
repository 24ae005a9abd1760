"""Helpers for interacting with the public CoinGecko API."""

from __future__ import annotations

import logging
from typing import Any, Iterable
from urllib.parse import quote

import httpx


logger = logging.getLogger("market_mood.coingecko")

COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"


class UpstreamError(Exception):
    """Base class for failed CoinGecko calls; `resource` names the call."""

    def __init__(self, resource: str, message: str) -> None:
        super().__init__(message)
        self.resource = resource


class UpstreamHTTPError(UpstreamError):
    def __init__(self, resource: str, status_code: int) -> None:
        super().__init__(resource, f"{resource} request failed with status {status_code}")
        self.status_code = status_code


class UpstreamTransportError(UpstreamError):
    def __init__(self, resource: str, detail: str) -> None:
        super().__init__(resource, f"{resource} request failed: {detail}")
        self.detail = detail


class CoinGeckoClient:
    """
    Thin async wrapper over the CoinGecko REST endpoints used by the API.
    Every call either returns decoded JSON or raises an UpstreamError
    subclass naming the resource that failed. Nothing is retried.
    """

    def __init__(
        self,
        base_url: str = COINGECKO_BASE_URL,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, resource: str, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamTransportError(resource, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            logger.warning("upstream non-success | %s | status=%s", resource, response.status_code)
            raise UpstreamHTTPError(resource, response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamTransportError(resource, "invalid JSON body") from exc

    async def fetch_markets(
        self,
        vs_currency: str = "usd",
        order: str = "market_cap_desc",
        per_page: int = 100,
        page: int = 1,
        sparkline: bool = False,
        price_change_percentage: Iterable[str] = ("24h", "7d", "30d"),
    ) -> list[dict[str, Any]]:
        params = {
            "vs_currency": vs_currency,
            "order": order,
            "per_page": per_page,
            "page": page,
            "sparkline": str(sparkline).lower(),
            "price_change_percentage": ",".join(price_change_percentage),
        }
        data = await self._get_json("markets", "/coins/markets", params)
        if not isinstance(data, list):
            raise UpstreamTransportError("markets", "expected a list of coins")
        return data

    async def fetch_trending(self) -> dict[str, Any]:
        data = await self._get_json("trending", "/search/trending")
        if not isinstance(data, dict):
            raise UpstreamTransportError("trending", "expected a JSON object")
        return data

    async def fetch_global(self) -> Any:
        # Shape varies; consumers read it through the global-stats fallback chain.
        return await self._get_json("global", "/global")

    async def fetch_simple_prices(
        self,
        ids: Iterable[str],
        vs_currencies: Iterable[str] = ("usd", "eur", "gbp"),
    ) -> dict[str, Any]:
        params = {
            "ids": ",".join(ids),
            "vs_currencies": ",".join(vs_currencies),
        }
        data = await self._get_json("simple-price", "/simple/price", params)
        if not isinstance(data, dict):
            raise UpstreamTransportError("simple-price", "expected a JSON object")
        return data

    async def fetch_coin_tickers(self, coin: str) -> dict[str, Any]:
        path = f"/coins/{quote(coin, safe='')}/tickers"
        data = await self._get_json("tickers", path, {"include_exchange_logo": "false"})
        if not isinstance(data, dict):
            raise UpstreamTransportError("tickers", "expected a JSON object")
        return data
