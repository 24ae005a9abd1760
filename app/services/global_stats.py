"""Read the 24h market-cap change out of a CoinGecko /global body."""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from app.utils.numbers import safe_number


class FlatGlobalStats(BaseModel):
    market_cap_change_percentage_24h_usd: Any = None


class EnvelopedGlobalStats(BaseModel):
    """The documented shape: {"data": {...}}."""

    data: FlatGlobalStats


def _from_envelope(global_json: Any) -> Optional[float]:
    parsed = EnvelopedGlobalStats.model_validate(global_json)
    return safe_number(parsed.data.market_cap_change_percentage_24h_usd)


def _from_flat(global_json: Any) -> Optional[float]:
    parsed = FlatGlobalStats.model_validate(global_json)
    return safe_number(parsed.market_cap_change_percentage_24h_usd)


# Tried in order; the first shape yielding a number wins.
SHAPE_EXTRACTORS: tuple[Callable[[Any], Optional[float]], ...] = (
    _from_envelope,
    _from_flat,
)


def extract_market_cap_change_24h(global_json: Any) -> Optional[float]:
    for extract in SHAPE_EXTRACTORS:
        try:
            value = extract(global_json)
        except ValidationError:
            continue
        if value is not None:
            return value
    return None
