# app/api/health.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request

from app.config.settings import get_settings

router = APIRouter(tags=["health"])

APP_STARTED_AT = time.time()


def _iso_z(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def _now_meta() -> Dict[str, Any]:
    now_ts = time.time()
    return {
        "now_ts": now_ts,
        "now_unix": int(now_ts),
        "now_iso": _iso_z(now_ts),
        "uptime_s": int(now_ts - APP_STARTED_AT),
    }


def _overview_cache_status(request: Request) -> Dict[str, Any]:
    service = getattr(request.app.state, "overview_service", None)
    if service is None:
        return {"configured": False, "has_data": False}

    now = service.clock()
    cache = service.cache
    age = cache.age(now)
    return {
        "configured": True,
        "has_data": cache.has_data,
        "age_s": None if age is None else int(age),
        "fresh": cache.is_fresh(service.settings.OVERVIEW_CACHE_TTL_S, now),
        "stored_at_iso": _iso_z(cache.timestamp) if cache.has_data else None,
    }


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    """
    Liveness only: never calls CoinGecko.
    """
    return {
        "ok": True,
        **_now_meta(),
        "overview_cache": _overview_cache_status(request),
        "cache_ttl_s": get_settings().OVERVIEW_CACHE_TTL_S,
    }
