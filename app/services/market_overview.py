from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional

from app.config.settings import Settings
from app.services.coingecko import CoinGeckoClient
from app.services.mood import compute_mood
from app.services.mood_states import adjacent_states
from app.services.snapshot import build_coins_row_from_top3, compute_top3_snapshot
from app.utils.cache import ResponseCache


logger = logging.getLogger("market_mood.overview")


class OverviewUnavailableError(Exception):
    """Refresh failed and there is no earlier payload to fall back on."""


def extract_trending_ids(trending_json: dict[str, Any]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for c in trending_json.get("coins") or []:
        item = c.get("item") if isinstance(c, dict) else None
        if isinstance(item, dict) and item.get("id"):
            out.append({"id": item["id"]})
    return out


async def fetch_market_overview(client: CoinGeckoClient, settings: Settings) -> dict[str, Any]:
    """
    Build the full overview payload (without `source`).

    All-or-nothing: any failed upstream call raises and no partial payload
    is returned. The simple-price call runs after the first group because
    it needs the listing's top ids.
    """
    markets, trending_json, global_json = await asyncio.gather(
        client.fetch_markets(per_page=settings.MARKETS_PER_PAGE),
        client.fetch_trending(),
        client.fetch_global(),
    )

    trending = extract_trending_ids(trending_json)

    top_ids = [c.get("id") for c in markets[: settings.CONVERTER_TOP_N]]
    converter_prices = await client.fetch_simple_prices(
        [i for i in top_ids if i],
        vs_currencies=settings.CONVERTER_CURRENCIES,
    )

    top3_snapshot = compute_top3_snapshot(markets)
    base_mood = compute_mood(markets, global_json)

    mood = {
        **base_mood,
        "adjacent": adjacent_states(base_mood["state"]),
        # themed image lookup happens client-side
        "ghostKey": base_mood["state"],
    }

    return {
        "markets": markets,
        "trending": trending,
        "global": global_json,
        "converterPrices": converter_prices,
        "mood": mood,
        "top3Snapshot": top3_snapshot,
        "coins": build_coins_row_from_top3(top3_snapshot),
    }


class MarketOverviewService:
    """
    Owns the overview cache slot and decides between cache, live and
    stale-cache for each request.
    """

    def __init__(
        self,
        client: CoinGeckoClient,
        settings: Settings,
        cache: ResponseCache | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.settings = settings
        self.cache = cache if cache is not None else ResponseCache()
        self.clock = clock
        self._inflight: Optional[asyncio.Task] = None

    async def _refresh(self) -> dict[str, Any]:
        if not self.settings.OVERVIEW_SINGLE_FLIGHT:
            return await fetch_market_overview(self.client, self.settings)

        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(fetch_market_overview(self.client, self.settings))
        # shield: one waiter going away must not cancel the shared fetch
        return await asyncio.shield(self._inflight)

    async def get_overview(self) -> tuple[dict[str, Any], str]:
        """
        Returns (payload, source) where source is live, cache or stale-cache.
        Raises OverviewUnavailableError when refresh fails with nothing cached.
        """
        now = self.clock()

        if self.cache.is_fresh(self.settings.OVERVIEW_CACHE_TTL_S, now):
            return self.cache.data, "cache"

        t0 = time.time()
        try:
            data = await self._refresh()
        except Exception as exc:
            logger.exception("overview refresh failed | %dms", int((time.time() - t0) * 1000))

            if self.cache.has_data:
                logger.warning("serving stale overview | age=%.0fs", self.cache.age(now) or 0.0)
                return self.cache.data, "stale-cache"

            raise OverviewUnavailableError("Failed to load market data") from exc

        self.cache.store(data, now)
        logger.info("overview refreshed | %dms", int((time.time() - t0) * 1000))
        return data, "live"
