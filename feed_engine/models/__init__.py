# Video models
from .video_models import VideoRecord, VideoType, VideoProjection

# Interaction models
from .interaction_models import UserInteractions, WatchHistoryEntry, Continuation

# Pipeline models
from .pipeline_models import FeedRefreshState

# Request/Response models
from .request_models import *
from .response_models import *

__all__ = [
    "VideoRecord",
    "VideoType",
    "VideoProjection",
    "UserInteractions",
    "WatchHistoryEntry",
    "Continuation",
    "FeedRefreshState",
]
