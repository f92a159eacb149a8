import asyncio

import pytest

from feed_engine.pipelines.refresh_orchestrator import FeedRefreshOrchestrator
from feed_engine.services.catalog_service import CatalogService
from feed_engine.services.errors import CatalogUnavailableError
from feed_engine.services.search_engine import SearchEngine, SearchPhase

from fakes import FakeCatalogSource, FakeRankingOracle, FakeSearchOracle


def _orchestrator(kv_store, interaction_store, source, oracle=None, search_engine=None):
    service = CatalogService(source, kv_store, cache_key="catalog")
    return FeedRefreshOrchestrator(service, interaction_store, oracle, search_engine)


def _ids(videos):
    return [v.id for v in videos]


@pytest.mark.asyncio
async def test_refresh_applies_oracle_order(kv_store, interaction_store, catalog):
    oracle = FakeRankingOracle(ids=["e", "c"])
    orchestrator = _orchestrator(kv_store, interaction_store, FakeCatalogSource(catalog), oracle)

    result = await orchestrator.refresh()

    assert result.ranking_applied is True
    assert _ids(result.feed) == ["e", "c", "a", "b", "d"]
    assert _ids(orchestrator.feed) == _ids(result.feed)
    assert orchestrator.loaded


@pytest.mark.asyncio
async def test_refresh_fails_open_when_oracle_raises(kv_store, interaction_store, catalog):
    oracle = FakeRankingOracle(error=TimeoutError("slow model"))
    orchestrator = _orchestrator(kv_store, interaction_store, FakeCatalogSource(catalog), oracle)

    result = await orchestrator.refresh()

    assert result.ranking_applied is False
    assert result.feed == catalog


@pytest.mark.asyncio
async def test_composed_feed_keeps_disliked_videos(kv_store, interaction_store, catalog):
    interaction_store.dislike("a")
    orchestrator = _orchestrator(kv_store, interaction_store, FakeCatalogSource(catalog))

    result = await orchestrator.refresh()
    assert "a" in _ids(result.feed)


@pytest.mark.asyncio
async def test_catalog_failure_propagates(kv_store, interaction_store):
    oracle = FakeRankingOracle(ids=["a"])
    source = FakeCatalogSource(error=ConnectionError("catalog offline"))
    orchestrator = _orchestrator(kv_store, interaction_store, source, oracle)

    with pytest.raises(CatalogUnavailableError):
        await orchestrator.refresh()

    assert oracle.calls == 0
    assert orchestrator.feed == []
    assert not orchestrator.loaded


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_feed(kv_store, interaction_store, catalog):
    source = FakeCatalogSource(catalog)
    orchestrator = _orchestrator(kv_store, interaction_store, source)
    await orchestrator.refresh()

    source.error = ConnectionError("catalog offline")
    with pytest.raises(CatalogUnavailableError):
        await orchestrator.refresh(hard=True)

    assert orchestrator.feed == catalog


@pytest.mark.asyncio
async def test_soft_refresh_reuses_cached_catalog(kv_store, interaction_store, catalog):
    source = FakeCatalogSource(catalog)
    oracle = FakeRankingOracle(ids=["b"])
    orchestrator = _orchestrator(kv_store, interaction_store, source, oracle)

    await orchestrator.refresh()
    await orchestrator.refresh()

    assert source.calls == 1
    assert oracle.calls == 2


@pytest.mark.asyncio
async def test_hard_refresh_clears_caches_and_refetches(kv_store, interaction_store, catalog):
    source = FakeCatalogSource(catalog)
    search_engine = SearchEngine(FakeSearchOracle(results={"q": ["a"]}), lambda: catalog)
    orchestrator = _orchestrator(kv_store, interaction_store, source, search_engine=search_engine)

    await orchestrator.refresh()
    await search_engine.search_now("q")
    assert kv_store.get("catalog") is not None

    source.videos = catalog[:2]
    result = await orchestrator.refresh(hard=True)

    assert source.calls == 2
    assert _ids(result.feed) == ["a", "b"]
    assert result.hard_refresh is True
    assert search_engine.state.phase == SearchPhase.IDLE


@pytest.mark.asyncio
async def test_overlapping_refresh_is_redundant(kv_store, interaction_store, catalog):
    source = FakeCatalogSource(catalog, delay=0.05)
    orchestrator = _orchestrator(kv_store, interaction_store, source)

    first, second = await asyncio.gather(orchestrator.refresh(hard=True), orchestrator.refresh(hard=True))

    assert first.redundant is False
    assert second.redundant is True
    assert source.calls == 1


@pytest.mark.asyncio
async def test_sequential_execution_without_graph(kv_store, interaction_store, catalog):
    oracle = FakeRankingOracle(ids=["d"])
    orchestrator = _orchestrator(kv_store, interaction_store, FakeCatalogSource(catalog), oracle)
    orchestrator.graph = None

    result = await orchestrator.refresh(hard=True)
    assert _ids(result.feed) == ["d", "a", "b", "c", "e"]

    orchestrator.catalog_service.source.error = ConnectionError("offline")
    with pytest.raises(CatalogUnavailableError):
        await orchestrator.refresh(hard=True)


@pytest.mark.asyncio
async def test_ensure_loaded_runs_once(kv_store, interaction_store, catalog):
    oracle = FakeRankingOracle(ids=[])
    orchestrator = _orchestrator(kv_store, interaction_store, FakeCatalogSource(catalog), oracle)

    await orchestrator.ensure_loaded()
    await orchestrator.ensure_loaded()
    assert oracle.calls == 1
