from __future__ import annotations

import asyncio

import pytest

from app.config.settings import Settings
from app.services.coingecko import UpstreamHTTPError, UpstreamTransportError
from app.services.market_overview import (
    MarketOverviewService,
    OverviewUnavailableError,
    extract_trending_ids,
    fetch_market_overview,
)
from app.utils.cache import ResponseCache


class _Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _service(fake, **settings_kwargs):
    clock = _Clock()
    service = MarketOverviewService(fake.client(), Settings(**settings_kwargs), clock=clock)
    return service, clock


@pytest.mark.asyncio
async def test_fetch_market_overview_payload(fake_coingecko):
    payload = await fetch_market_overview(fake_coingecko.client(), Settings())

    assert set(payload) == {"markets", "trending", "global", "converterPrices", "mood", "top3Snapshot", "coins"}
    assert payload["trending"] == [{"id": "pepe"}, {"id": "solana"}]
    assert payload["markets"] == fake_coingecko.bodies["markets"]
    assert [c["symbol"] for c in payload["coins"]] == ["BTC", "ETH", "SOL"]

    mood = payload["mood"]
    assert mood["ghostKey"] == mood["state"]
    assert set(mood["adjacent"]) == {"prev", "next"}
    assert 0 <= mood["score"] <= 100


@pytest.mark.asyncio
async def test_simple_price_requested_for_top_ids(fake_coingecko):
    fake_coingecko.bodies["markets"] = [{"id": f"coin-{i}"} for i in range(80)]

    await fetch_market_overview(fake_coingecko.client(), Settings())

    markets_req = fake_coingecko.calls_for("markets")[0]
    assert markets_req.url.params["per_page"] == "100"
    assert markets_req.url.params["price_change_percentage"] == "24h,7d,30d"
    assert markets_req.url.params["sparkline"] == "false"

    price_req = fake_coingecko.calls_for("simple-price")[0]
    ids = price_req.url.params["ids"].split(",")
    assert ids == [f"coin-{i}" for i in range(50)]
    assert price_req.url.params["vs_currencies"] == "usd,eur,gbp"

    # dependent call goes last
    assert fake_coingecko.calls[-1] is price_req


@pytest.mark.asyncio
@pytest.mark.parametrize("resource", ["markets", "trending", "global", "simple-price"])
async def test_failures_name_the_resource(fake_coingecko, resource):
    fake_coingecko.statuses[resource] = 503

    with pytest.raises(UpstreamHTTPError) as excinfo:
        await fetch_market_overview(fake_coingecko.client(), Settings())

    assert excinfo.value.resource == resource
    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_first_group_failure_skips_simple_price(fake_coingecko):
    fake_coingecko.broken.add("global")

    with pytest.raises(UpstreamTransportError) as excinfo:
        await fetch_market_overview(fake_coingecko.client(), Settings())

    assert excinfo.value.resource == "global"
    assert fake_coingecko.calls_for("simple-price") == []


def test_extract_trending_ids_skips_malformed():
    trending = {"coins": [{"item": {"id": "a"}}, {"item": {}}, {"nope": 1}, "junk", {"item": {"id": "b"}}]}
    assert extract_trending_ids(trending) == [{"id": "a"}, {"id": "b"}]
    assert extract_trending_ids({}) == []


@pytest.mark.asyncio
async def test_live_then_cache_without_upstream_calls(fake_coingecko):
    service, clock = _service(fake_coingecko)

    data, source = await service.get_overview()
    assert source == "live"
    calls_after_live = len(fake_coingecko.calls)
    assert calls_after_live == 4

    clock.now += 60
    cached, source = await service.get_overview()

    assert source == "cache"
    assert cached is data
    assert len(fake_coingecko.calls) == calls_after_live


@pytest.mark.asyncio
async def test_expired_cache_refreshes(fake_coingecko):
    service, clock = _service(fake_coingecko)
    await service.get_overview()

    clock.now += 300
    _, source = await service.get_overview()

    assert source == "live"
    assert len(fake_coingecko.calls) == 8
    assert service.cache.timestamp == clock.now


@pytest.mark.asyncio
async def test_stale_cache_served_unmodified(fake_coingecko):
    service, clock = _service(fake_coingecko)
    data, _ = await service.get_overview()
    snapshot = repr(data)
    stored_at = service.cache.timestamp

    fake_coingecko.statuses["markets"] = 500
    clock.now += 3600
    stale, source = await service.get_overview()

    assert source == "stale-cache"
    assert stale is data
    assert repr(stale) == snapshot
    # failure never refreshes or evicts the slot
    assert service.cache.timestamp == stored_at
    assert service.cache.data is data


@pytest.mark.asyncio
async def test_no_cache_and_failure_raises(fake_coingecko):
    fake_coingecko.broken.add("trending")
    service, _ = _service(fake_coingecko)

    with pytest.raises(OverviewUnavailableError):
        await service.get_overview()

    assert not service.cache.has_data


@pytest.mark.asyncio
async def test_prepopulated_cache_is_used(fake_coingecko):
    cache = ResponseCache()
    cache.store({"markets": []}, now=1000.0)
    service = MarketOverviewService(fake_coingecko.client(), Settings(), cache=cache, clock=lambda: 1060.0)

    data, source = await service.get_overview()

    assert (data, source) == ({"markets": []}, "cache")
    assert fake_coingecko.calls == []


@pytest.mark.asyncio
async def test_concurrent_misses_without_single_flight(fake_coingecko):
    service, _ = _service(fake_coingecko)

    results = await asyncio.gather(service.get_overview(), service.get_overview())

    assert [source for _, source in results] == ["live", "live"]
    assert len(fake_coingecko.calls_for("markets")) == 2


@pytest.mark.asyncio
async def test_single_flight_coalesces_concurrent_misses(fake_coingecko):
    service, _ = _service(fake_coingecko, OVERVIEW_SINGLE_FLIGHT=True)

    results = await asyncio.gather(*(service.get_overview() for _ in range(3)))

    assert all(source == "live" for _, source in results)
    assert len(fake_coingecko.calls_for("markets")) == 1
    assert results[0][0] is results[2][0]
