import pytest

from feed_engine.models.interaction_models import UserInteractions
from feed_engine.services.feed_composer import compose_feed, request_ranking, resolve_identifier

from fakes import FakeRankingOracle


def _ids(videos):
    return [v.id for v in videos]


@pytest.mark.parametrize("ranked", [
    [],
    ["c"],
    ["unknown", "zzz"],
    ["e", "unknown", "a"],
    ["a", "b", "c", "d", "e"],
])
def test_feed_contains_every_catalog_record_once(catalog, ranked):
    feed = compose_feed(catalog, ranked)
    assert sorted(_ids(feed)) == sorted(_ids(catalog))


def test_oracle_order_comes_first(catalog):
    feed = compose_feed(catalog, ["b", "a"])
    assert _ids(feed) == ["b", "a", "c", "d", "e"]


def test_unknown_ids_are_dropped(catalog):
    feed = compose_feed(catalog, ["ghost", "d"])
    assert _ids(feed) == ["d", "a", "b", "c", "e"]


def test_duplicate_oracle_ids_are_placed_once(catalog):
    feed = compose_feed(catalog, ["c", "c", "a"])
    assert _ids(feed) == ["c", "a", "b", "d", "e"]


def test_no_ranking_keeps_catalog_order(catalog):
    assert compose_feed(catalog, None) == catalog


def test_resolve_identifier_matches_public_id(catalog):
    assert resolve_identifier("pub-d", catalog).id == "d"
    assert resolve_identifier("d", catalog).id == "d"
    assert resolve_identifier("nope", catalog) is None


def test_alias_reference_keeps_record_in_remainder(catalog):
    # The remainder is computed on primary ids, so a record named only through
    # its public_id alias is placed by the oracle and again in catalog order.
    feed = compose_feed(catalog, ["pub-d"])
    assert _ids(feed) == ["d", "a", "b", "c", "d", "e"]


def test_alias_and_primary_reference_place_record_once(catalog):
    feed = compose_feed(catalog, ["pub-d", "d"])
    assert _ids(feed) == ["d", "a", "b", "c", "e"]


@pytest.mark.asyncio
async def test_request_ranking_returns_oracle_ids(catalog):
    oracle = FakeRankingOracle(ids=["b", 7, "a"])
    ids = await request_ranking(catalog, UserInteractions(), oracle)
    assert ids == ["b", "a"]
    assert oracle.calls == 1


@pytest.mark.asyncio
async def test_request_ranking_fails_open(catalog):
    oracle = FakeRankingOracle(error=RuntimeError("model overloaded"))
    assert await request_ranking(catalog, UserInteractions(), oracle) is None


@pytest.mark.asyncio
async def test_request_ranking_rejects_malformed_output(catalog):
    oracle = FakeRankingOracle(ids={"ids": ["a"]})
    assert await request_ranking(catalog, UserInteractions(), oracle) is None


@pytest.mark.asyncio
async def test_request_ranking_without_oracle(catalog):
    assert await request_ranking(catalog, UserInteractions(), None) is None
