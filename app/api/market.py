from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

# Services
from app.services.coingecko import CoinGeckoClient, UpstreamHTTPError
from app.services.market_overview import MarketOverviewService, OverviewUnavailableError
from app.services.tickers import DEFAULT_COIN, fetch_coin_tickers

# Schemas
from app.schemas.market import CoinTickersResponse, MarketOverviewResponse

# Config
from app.config.settings import get_settings


logger = logging.getLogger("market_mood.tickers")

router = APIRouter(tags=["market"])

OVERVIEW_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# Shared edge cache for successful ticker lookups
TICKERS_CACHE_CONTROL = "s-maxage=300, stale-while-revalidate=600"


def get_overview_service(request: Request) -> MarketOverviewService:
    return request.app.state.overview_service


def get_coingecko_client(request: Request) -> CoinGeckoClient:
    return request.app.state.coingecko


@router.options("/market-overview")
async def market_overview_preflight() -> Response:
    return Response(status_code=200, headers=OVERVIEW_CORS_HEADERS)


@router.get(
    "/market-overview",
    response_model=MarketOverviewResponse,
    responses={500: {"description": "No cached data and upstream refresh failed"}},
)
async def get_market_overview(
    response: Response,
    service: MarketOverviewService = Depends(get_overview_service),
):
    try:
        data, source = await service.get_overview()
    except OverviewUnavailableError:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to load market data"},
            headers=OVERVIEW_CORS_HEADERS,
        )

    response.headers.update(OVERVIEW_CORS_HEADERS)
    return {**data, "source": source}


@router.get(
    "/coin-tickers",
    response_model=CoinTickersResponse,
    responses={502: {"description": "CoinGecko returned a non-success status"}},
)
async def get_coin_tickers(
    response: Response,
    coin: str = DEFAULT_COIN,
    client: CoinGeckoClient = Depends(get_coingecko_client),
):
    """
    Top USD-quoted exchange tickers for one coin, by volume.
    Example: /coin-tickers?coin=ethereum
    """
    cors = {"Access-Control-Allow-Origin": "*"}
    coin = coin or DEFAULT_COIN

    try:
        tickers = await fetch_coin_tickers(client, coin, limit=get_settings().TICKERS_LIMIT)
    except UpstreamHTTPError as exc:
        return JSONResponse(
            status_code=502,
            content={"error": "CoinGecko error", "status": exc.status_code},
            headers=cors,
        )
    except Exception:
        logger.exception("coin-tickers error | coin=%s", coin)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch CoinGecko"},
            headers=cors,
        )

    response.headers["Cache-Control"] = TICKERS_CACHE_CONTROL
    response.headers.update(cors)
    return {"coin": coin, "tickers": tickers, "source": "live-or-cache"}
