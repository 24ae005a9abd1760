from __future__ import annotations

from typing import Any, Iterable

from app.utils.numbers import safe_number


TOP3_IDS: tuple[str, ...] = ("bitcoin", "ethereum", "solana")


def compute_top3_snapshot(markets: Iterable[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """
    Condensed view of bitcoin, ethereum and solana, in that order.
    Coins missing from the listing are skipped.
    """
    by_id: dict[str, dict[str, Any]] = {}
    for coin in markets or []:
        by_id.setdefault(coin.get("id"), coin)

    snapshot: list[dict[str, Any]] = []
    for coin_id in TOP3_IDS:
        c = by_id.get(coin_id)
        if c is None:
            continue

        snapshot.append(
            {
                "id": c.get("id"),
                "name": c.get("name"),
                "symbol": c.get("symbol"),
                "priceUsd": safe_number(c.get("current_price")),
                "change24hPct": safe_number(c.get("price_change_percentage_24h_in_currency")),
                "change30dPct": safe_number(c.get("price_change_percentage_30d_in_currency")),
                "marketCapUsd": safe_number(c.get("market_cap")),
            }
        )
    return snapshot


def build_coins_row_from_top3(top3_snapshot: Iterable[dict[str, Any]] | None) -> list[dict[str, Any]]:
    return [
        {
            "id": c.get("id"),
            "symbol": str(c.get("symbol") or "").upper(),
            "name": c.get("name"),
            "priceUsd": c.get("priceUsd"),
            "chg24h": c.get("change24hPct"),
            "chg30d": c.get("change30dPct"),
        }
        for c in top3_snapshot or []
    ]
