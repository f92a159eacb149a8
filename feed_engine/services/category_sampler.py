import random
from typing import Callable, List, Optional, Sequence, TypeVar

from feed_engine.models.video_models import VideoRecord, VideoType

T = TypeVar("T")

# Returns a uniform draw in [0, 1)
RandomSource = Callable[[], float]

DISCOVERY_TARGET = 4


def category_token(label: str) -> str:
    """Leading token of a category label, used as its match key"""
    return label.split(" ")[0]


def _pick_index(draw: RandomSource, size: int) -> int:
    # Guards against sources that return exactly 1.0
    return min(int(draw() * size), size - 1)


def shuffled(items: Sequence[T], draw: RandomSource) -> List[T]:
    """Fisher-Yates shuffle driven by the given draw source"""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = _pick_index(draw, i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def sample_categories(catalog: Sequence[VideoRecord], categories: Sequence[str],
                      target: int = DISCOVERY_TARGET,
                      draw: Optional[RandomSource] = None) -> List[VideoRecord]:
    """
    Pick up to `target` short videos, one random video per category in a random
    category order, then backfill from the remaining shorts in catalog order.
    A video is never picked twice.
    """
    draw = draw or random.random
    shorts = [v for v in catalog if v.type == VideoType.SHORT]

    picked: List[VideoRecord] = []
    picked_ids = set()
    for label in shuffled(categories, draw):
        if len(picked) >= target:
            break
        token = category_token(label)
        matches = [v for v in shorts if token in v.category and v.id not in picked_ids]
        if matches:
            choice = matches[_pick_index(draw, len(matches))]
            picked.append(choice)
            picked_ids.add(choice.id)

    for video in shorts:
        if len(picked) >= target:
            break
        if video.id not in picked_ids:
            picked.append(video)
            picked_ids.add(video.id)

    return picked
