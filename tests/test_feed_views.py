import pytest

from feed_engine.models.interaction_models import UserInteractions, WatchHistoryEntry
from feed_engine.services.feed_views import (
    build_home,
    deterministic_stats,
    format_big_number,
    library_view,
    video_card,
    visible_feed,
)

from fakes import SequenceDraw, make_video


def _ids(videos):
    return [v.id for v in videos]


def test_visible_feed_excludes_disliked(catalog):
    interactions = UserInteractions(disliked_ids=["b", "d"])
    assert _ids(visible_feed(catalog, interactions)) == ["a", "c", "e"]


def test_home_sections(catalog):
    interactions = UserInteractions(
        disliked_ids=["e"],
        watch_history=[WatchHistoryEntry(id="c", progress=0.5), WatchHistoryEntry(id="e", progress=0.3)],
    )
    categories = ["Garden Horror ⚠️", "Animal Horror 🔱", "Real Horror ✴️"]

    home = build_home(catalog, interactions, categories, draw=SequenceDraw([0.0]))

    assert "e" not in _ids(home.top_shorts)
    assert sorted(_ids(home.top_shorts)) == ["a", "b"]
    # continuation reads the full feed, disliked videos included
    assert [c.video.id for c in home.continue_watching] == ["e", "c"]
    assert _ids(home.featured_longs) == ["c", "d"]
    assert home.quick_shorts == []
    assert [(r.label, _ids(r.videos)) for r in home.category_rails] == [
        ("Animal Horror 🔱", ["d"]),
        ("Real Horror ✴️", ["c"]),
    ]


def test_quick_shorts_skip_the_first_four():
    feed = [make_video(f"s{i}") for i in range(40)]
    home = build_home(feed, UserInteractions(), [], draw=SequenceDraw([0.0]))
    assert _ids(home.quick_shorts) == [f"s{i}" for i in range(4, 30)]


def test_library_views(catalog):
    interactions = UserInteractions(
        liked_ids=["d", "ghost", "a"],
        saved_ids=["c"],
        disliked_ids=["e", "b"],
    )
    assert _ids(library_view("liked", catalog, interactions)) == ["d", "a"]
    assert _ids(library_view("saved", catalog, interactions)) == ["c"]
    assert _ids(library_view("hidden", catalog, interactions)) == ["b", "e"]

    with pytest.raises(ValueError):
        library_view("watched", catalog, interactions)


def test_deterministic_stats():
    assert deterministic_stats("") == {"views": 0, "likes": 0}
    assert deterministic_stats("a") == {"views": 597, "likes": 186}
    assert deterministic_stats("some-long-video-id") == deterministic_stats("some-long-video-id")

    for seed in ["x", "video_123", "رعب", "🦁 lion"]:
        stats = deterministic_stats(seed)
        assert 500 <= stats["views"] < 10500
        assert stats["likes"] >= 0


def test_format_big_number():
    assert format_big_number(999) == "999"
    assert format_big_number(1500) == "1.5K"
    assert format_big_number(2300000) == "2.3M"


def test_video_card_labels(catalog):
    card = video_card(catalog[0])
    assert card.video == catalog[0]
    assert card.stats.views_label == format_big_number(card.stats.views)
