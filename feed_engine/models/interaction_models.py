# Models for the persisted user-interaction aggregate
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .video_models import VideoRecord


class WatchHistoryEntry(BaseModel):
    id: str
    progress: float = Field(0.0, ge=0.0, le=1.0)


class UserInteractions(BaseModel):
    """
    Aggregate of every user signal. Persisted as one JSON document using the
    camelCase field names; the id lists behave as sets but keep insertion order.
    """
    model_config = ConfigDict(populate_by_name=True)

    liked_ids: List[str] = Field(default_factory=list, alias="likedIds")
    disliked_ids: List[str] = Field(default_factory=list, alias="dislikedIds")
    saved_ids: List[str] = Field(default_factory=list, alias="savedIds")
    watch_history: List[WatchHistoryEntry] = Field(default_factory=list, alias="watchHistory")

    def progress_for(self, video_id: str) -> float:
        for entry in self.watch_history:
            if entry.id == video_id:
                return entry.progress
        return 0.0


class Continuation(BaseModel):
    """A partially watched video and how far along it is"""
    video: VideoRecord
    progress: float
