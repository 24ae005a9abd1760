from __future__ import annotations

from typing import Any, Iterable

from app.services.coingecko import CoinGeckoClient
from app.utils.numbers import safe_number


DEFAULT_COIN = "bitcoin"
DEFAULT_LIMIT = 6


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _usd_quoted(t: dict[str, Any]) -> bool:
    target = t.get("target")
    converted_last = t.get("converted_last") or {}
    return (
        bool(target)
        and "USD" in str(target).upper()
        and isinstance(converted_last, dict)
        and _is_number(converted_last.get("usd"))
    )


def select_usd_tickers(raw_tickers: Iterable[dict[str, Any]] | None, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    """
    USD-quoted pairs with a converted USD price, highest volume first.
    """
    rows = []
    for t in raw_tickers or []:
        if not _usd_quoted(t):
            continue

        market = t.get("market") or {}
        converted_volume = t.get("converted_volume")
        usd_volume = converted_volume.get("usd") if isinstance(converted_volume, dict) else None
        volume = safe_number(usd_volume) or 0
        rows.append(
            {
                "exchange": market.get("name") or "Unknown",
                "pair": f"{str(t.get('base') or '').upper()}/{str(t.get('target') or '').upper()}",
                "price": t["converted_last"]["usd"],
                "volume": volume,
            }
        )

    rows.sort(key=lambda r: r["volume"], reverse=True)
    return rows[:limit]


async def fetch_coin_tickers(
    client: CoinGeckoClient,
    coin: str = DEFAULT_COIN,
    limit: int = DEFAULT_LIMIT,
) -> list[dict[str, Any]]:
    data = await client.fetch_coin_tickers(coin)
    return select_usd_tickers(data.get("tickers"), limit)
