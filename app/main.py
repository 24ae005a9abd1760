# app/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from app.api.market import router as market_router
from app.api.health import router as health_router

from app.config.settings import get_settings

from app.services.coingecko import CoinGeckoClient
from app.services.market_overview import MarketOverviewService


logger = logging.getLogger("market_mood.app")

app = FastAPI(title="Market Mood API")

# Routers
app.include_router(health_router)
app.include_router(market_router)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Market mood is up"}


@app.on_event("startup")
async def on_startup() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    # One client and one cache slot for the whole process
    client = CoinGeckoClient(
        base_url=settings.COINGECKO_BASE_URL,
        timeout=settings.COINGECKO_TIMEOUT_S,
    )
    app.state.coingecko = client
    app.state.overview_service = MarketOverviewService(client, settings)

    logger.info(
        "market mood started | ttl=%ss | single_flight=%s",
        settings.OVERVIEW_CACHE_TTL_S,
        settings.OVERVIEW_SINGLE_FLIGHT,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    client = getattr(app.state, "coingecko", None)
    if client is not None:
        await client.aclose()
    app.state.coingecko = None
    app.state.overview_service = None
