from typing import List, Optional
from typing_extensions import TypedDict

from .interaction_models import UserInteractions
from .video_models import VideoRecord


class FeedRefreshState(TypedDict, total=False):
    """
    State object for the feed refresh pipeline
    Compatible with LangGraph's state handling
    """
    # Input
    hard_refresh: bool
    interactions: UserInteractions

    # Pipeline data
    catalog: Optional[List[VideoRecord]]
    ranked_ids: Optional[List[str]]
    ranking_applied: bool
    feed: Optional[List[VideoRecord]]

    # Pipeline metadata
    pipeline_step: str
    error: Optional[str]
    execution_time: Optional[float]
