"""
Lightweight market mood: breadth + leadership + global market-cap change.

Deliberately avoids per-coin history so one /coins/markets call is enough.
MA/ATR breadth can be layered on later from a separately cached source.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional

from app.services.global_stats import extract_market_cap_change_24h
from app.utils.numbers import median, safe_number


LEADER_ID = "bitcoin"
MISSING_CHANGE = -999.0

# (min score, state, label), checked top-down
MOOD_THRESHOLDS: tuple[tuple[int, str, str], ...] = (
    (75, "snack-mode", "Snack Mode"),
    (60, "steady-bite", "Steady Bite"),
    (45, "side-eye", "Side-Eye"),
    (30, "clutching-cookies", "Clutching Cookies"),
)
FLOOR_STATE = ("crumbs-everywhere", "Crumbs Everywhere")
UNKNOWN_STATE = ("unknown", "Unknown")


def _change(coin: dict[str, Any], window: str) -> Optional[float]:
    return safe_number(coin.get(f"price_change_percentage_{window}_in_currency"))


def _pct_up(markets: list[dict[str, Any]], window: str) -> float:
    up = 0
    for c in markets:
        value = _change(c, window)
        if (value if value is not None else MISSING_CHANGE) > 0:
            up += 1
    return up / len(markets)


def leadership_gap_30d(markets: list[dict[str, Any]]) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """
    Returns (leader_30d, median_alt_30d, gap).
    A large positive gap means BTC is up while alts lag.
    """
    leader = next((c for c in markets if c.get("id") == LEADER_ID), None)
    leader_30d = _change(leader, "30d") if leader is not None else None

    median_alt_30d = median(
        c.get("price_change_percentage_30d_in_currency")
        for c in markets
        if c.get("id") != LEADER_ID
    )

    if leader_30d is None or median_alt_30d is None:
        return leader_30d, median_alt_30d, None
    return leader_30d, median_alt_30d, leader_30d - median_alt_30d


def score_from_signals(
    pct_up_24h: float,
    pct_up_7d: float,
    leadership_gap: Optional[float],
    global_change: Optional[float],
) -> int:
    """
    Blend the signals into a 0..100 score.

    - Breadth matters most: each window swings the score by +/-20.
    - Only a positive leadership gap penalizes (narrow, BTC-led market).
    - The global market-cap change nudges the score.
    """
    score = 50.0

    score += (pct_up_24h - 0.5) * 40
    score += (pct_up_7d - 0.5) * 40

    if leadership_gap is not None:
        score -= max(0.0, leadership_gap) * 0.5

    if global_change is not None:
        score += global_change * 1.5

    # half-up rounding, not banker's
    return max(0, min(100, math.floor(score + 0.5)))


def label_for_score(score: int) -> tuple[str, str]:
    for threshold, state, label in MOOD_THRESHOLDS:
        if score >= threshold:
            return state, label
    return FLOOR_STATE


def compute_mood(markets: Iterable[dict[str, Any]] | None, global_json: Any) -> dict[str, Any]:
    arr = list(markets or [])
    if not arr:
        state, label = UNKNOWN_STATE
        return {"state": state, "label": label, "score": None, "metrics": {}}

    pct_up_24h = _pct_up(arr, "24h")
    pct_up_7d = _pct_up(arr, "7d")

    btc_30d, median_alt_30d, gap = leadership_gap_30d(arr)
    mcap_change_24h = extract_market_cap_change_24h(global_json)

    score = score_from_signals(pct_up_24h, pct_up_7d, gap, mcap_change_24h)
    state, label = label_for_score(score)

    return {
        "state": state,
        "label": label,
        "score": score,
        "metrics": {
            "pctUp24h": round(pct_up_24h, 2),
            "pctUp7d": round(pct_up_7d, 2),
            "btc30d": btc_30d,
            "medianAlt30d": median_alt_30d,
            "leadershipGap30d": gap,
            "marketCapChange24hPct": mcap_change_24h,
        },
    }
