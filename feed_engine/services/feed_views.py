"""
Read-only views derived from the composed feed and the viewer's interactions
"""
import math
from typing import Dict, List, Optional, Sequence

from feed_engine.models.interaction_models import UserInteractions
from feed_engine.models.response_models import CategoryRail, HomeView, VideoCard, VideoStats
from feed_engine.models.video_models import VideoRecord, VideoType
from feed_engine.services.category_sampler import RandomSource, category_token, sample_categories
from feed_engine.services.continuation_selector import select_continuations

LIBRARY_KINDS = ("liked", "saved", "hidden")


def visible_feed(feed: Sequence[VideoRecord], interactions: UserInteractions) -> List[VideoRecord]:
    """The feed without disliked videos. Callers must display this, not the raw feed."""
    excluded = set(interactions.disliked_ids)
    return [v for v in feed if (v.id or v.video_url) not in excluded]


def split_by_type(videos: Sequence[VideoRecord]):
    shorts = [v for v in videos if v.type == VideoType.SHORT]
    longs = [v for v in videos if v.type == VideoType.LONG]
    return shorts, longs


def build_home(feed: Sequence[VideoRecord], interactions: UserInteractions,
               categories: Sequence[str], draw: Optional[RandomSource] = None) -> HomeView:
    visible = visible_feed(feed, interactions)
    shorts, longs = split_by_type(visible)

    rails = []
    for label in categories:
        token = category_token(label)
        videos = [v for v in longs if token in v.category]
        if videos:
            rails.append(CategoryRail(label=label, videos=videos))

    return HomeView(
        top_shorts=sample_categories(shorts, categories, draw=draw),
        continue_watching=select_continuations(interactions.watch_history, feed),
        featured_longs=longs[:4],
        quick_shorts=shorts[4:30],
        category_rails=rails,
    )


def library_view(kind: str, feed: Sequence[VideoRecord], interactions: UserInteractions) -> List[VideoRecord]:
    """
    liked / saved: videos in the order they were added; hidden: disliked videos in feed order
    """
    if kind == "hidden":
        disliked = set(interactions.disliked_ids)
        return [v for v in feed if v.id in disliked]

    if kind == "liked":
        ids = interactions.liked_ids
    elif kind == "saved":
        ids = interactions.saved_ids
    else:
        raise ValueError(f"Unknown library: {kind}")

    by_id: Dict[str, VideoRecord] = {}
    for video in feed:
        by_id.setdefault(video.id, video)
    return [by_id[i] for i in ids if i in by_id]


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _signed_mod(value: float, modulus: int) -> float:
    # Remainder takes the sign of the dividend
    return math.fmod(value, modulus)


def deterministic_stats(seed: str) -> Dict[str, int]:
    """
    Stable display counters derived from a 32-bit rolling hash of the seed
    """
    if not seed:
        return {"views": 0, "likes": 0}

    h = 0
    for ch in seed:
        for unit in _utf16_units(ch):
            h = _to_int32((h << 5) - h + unit)

    views = int(abs(_signed_mod(h, 10000))) + 500
    likes = abs(math.floor(views * 0.15 + _signed_mod(h, 100)))
    return {"views": views, "likes": int(likes)}


def _utf16_units(ch: str) -> List[int]:
    code = ord(ch)
    if code < 0x10000:
        return [code]
    code -= 0x10000
    return [0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF)]


def format_big_number(num: int) -> str:
    if num >= 1000000:
        return f"{num / 1000000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(num)


def video_card(video: VideoRecord) -> VideoCard:
    stats = deterministic_stats(video.id)
    return VideoCard(
        video=video,
        stats=VideoStats(
            views=stats["views"],
            likes=stats["likes"],
            views_label=format_big_number(stats["views"]),
            likes_label=format_big_number(stats["likes"]),
        ),
    )
