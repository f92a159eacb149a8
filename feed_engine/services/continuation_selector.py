from typing import List, Optional, Sequence
import logging

from feed_engine.models.interaction_models import Continuation, WatchHistoryEntry
from feed_engine.models.video_models import VideoRecord

logger = logging.getLogger(__name__)

# Progress strictly between these bounds counts as "in progress"
MIN_PROGRESS = 0.05
MAX_PROGRESS = 0.95


def resolve_history_entry(entry_id: str, catalog: Sequence[VideoRecord]) -> Optional[VideoRecord]:
    """
    Match a history id against the primary id, or against the media URL that
    older history entries stored in place of the id.
    """
    for video in catalog:
        if video.id == entry_id or (video.media_key and video.media_key == entry_id):
            return video
    return None


def select_continuations(watch_history: Sequence[WatchHistoryEntry],
                         catalog: Sequence[VideoRecord]) -> List[Continuation]:
    """
    Videos with partial progress, most recently touched first, one per video
    """
    seen = set()
    result: List[Continuation] = []

    for entry in reversed(watch_history):
        if not (MIN_PROGRESS < entry.progress < MAX_PROGRESS):
            continue

        video = resolve_history_entry(entry.id, catalog)
        if video is None or video.id in seen:
            continue

        seen.add(video.id)
        result.append(Continuation(video=video, progress=entry.progress))

    logger.debug(f"Selected {len(result)} continuations from {len(watch_history)} history entries")
    return result
