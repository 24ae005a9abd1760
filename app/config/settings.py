# app/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Tuple


def parse_csv(value: str | None, default: List[str]) -> List[str]:
    if not value:
        return default
    items = [x.strip() for x in value.split(",")]
    return [x for x in items if x]


def parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value)


def parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    COINGECKO_BASE_URL: str = "https://api.coingecko.com/api/v3"
    COINGECKO_TIMEOUT_S: float = 10.0
    OVERVIEW_CACHE_TTL_S: float = 300.0
    MARKETS_PER_PAGE: int = 100
    CONVERTER_TOP_N: int = 50
    CONVERTER_CURRENCIES: Tuple[str, ...] = ("usd", "eur", "gbp")
    TICKERS_LIMIT: int = 6
    OVERVIEW_SINGLE_FLIGHT: bool = False
    LOG_LEVEL: str = "INFO"

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            COINGECKO_BASE_URL=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3"),
            COINGECKO_TIMEOUT_S=parse_float(os.getenv("COINGECKO_TIMEOUT_S"), 10.0),
            OVERVIEW_CACHE_TTL_S=parse_float(os.getenv("OVERVIEW_CACHE_TTL_S"), 300.0),
            MARKETS_PER_PAGE=parse_int(os.getenv("MARKETS_PER_PAGE"), 100),
            CONVERTER_TOP_N=parse_int(os.getenv("CONVERTER_TOP_N"), 50),
            CONVERTER_CURRENCIES=tuple(parse_csv(os.getenv("CONVERTER_CURRENCIES"), ["usd", "eur", "gbp"])),
            TICKERS_LIMIT=parse_int(os.getenv("TICKERS_LIMIT"), 6),
            OVERVIEW_SINGLE_FLIGHT=parse_bool(os.getenv("OVERVIEW_SINGLE_FLIGHT"), False),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
