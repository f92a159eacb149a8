# Pydantic models for outgoing API responses
from typing import List, Optional

from pydantic import BaseModel

from .interaction_models import Continuation
from .video_models import VideoRecord


class VideoStats(BaseModel):
    views: int
    likes: int
    views_label: str
    likes_label: str


class VideoCard(BaseModel):
    video: VideoRecord
    stats: VideoStats


class CategoryRail(BaseModel):
    label: str
    videos: List[VideoRecord]


class HomeView(BaseModel):
    top_shorts: List[VideoRecord] = []
    continue_watching: List[Continuation] = []
    featured_longs: List[VideoRecord] = []
    quick_shorts: List[VideoRecord] = []
    category_rails: List[CategoryRail] = []


class FeedResponse(BaseModel):
    videos: List[VideoCard]
    total: int


class FeedRefreshResult(BaseModel):
    feed: List[VideoRecord]
    ranking_applied: bool = False
    hard_refresh: bool = False
    redundant: bool = False
    execution_time: Optional[float] = None


class SearchResponse(BaseModel):
    query: str
    sequence: int
    phase: str
    videos: List[VideoRecord] = []
