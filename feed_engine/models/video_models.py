# Models for catalog video records
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class VideoType(str, Enum):
    SHORT = "short"
    LONG = "long"


class VideoRecord(BaseModel):
    """
    One catalog entry. Records are immutable within a session: the engine
    only reorders and filters references to them.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    public_id: Optional[str] = None  # secondary alias used by the ranking oracle
    title: str = ""
    category: str = ""
    type: VideoType = VideoType.SHORT
    video_url: str = ""
    poster_url: Optional[str] = None

    @property
    def media_key(self) -> str:
        """Key used by legacy watch-history entries that stored the media URL"""
        return self.video_url


class VideoProjection(BaseModel):
    """Reduced catalog row sent to the search oracle"""
    id: str
    title: str
    category: str
