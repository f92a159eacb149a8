from fastapi import APIRouter, Depends
import logging

from feed_engine.api.dependencies import get_engine
from feed_engine.models.interaction_models import UserInteractions
from feed_engine.models.request_models import ProgressRequest
from feed_engine.services.engine import FeedEngine

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=UserInteractions, response_model_by_alias=True)
def get_interactions(engine: FeedEngine = Depends(get_engine)):
    return engine.interaction_store.state


@router.post("/{video_id}/like", response_model=UserInteractions, response_model_by_alias=True)
def like_video(video_id: str, engine: FeedEngine = Depends(get_engine)):
    return engine.interaction_store.like(video_id)


@router.post("/{video_id}/dislike", response_model=UserInteractions, response_model_by_alias=True)
def dislike_video(video_id: str, engine: FeedEngine = Depends(get_engine)):
    return engine.interaction_store.dislike(video_id)


@router.post("/{video_id}/restore", response_model=UserInteractions, response_model_by_alias=True)
def restore_video(video_id: str, engine: FeedEngine = Depends(get_engine)):
    """Un-hide a previously disliked video"""
    return engine.interaction_store.restore(video_id)


@router.post("/{video_id}/save", response_model=UserInteractions, response_model_by_alias=True)
def save_video(video_id: str, engine: FeedEngine = Depends(get_engine)):
    return engine.interaction_store.save_bookmark(video_id)


@router.post("/progress", response_model=UserInteractions, response_model_by_alias=True)
def record_progress(request: ProgressRequest, engine: FeedEngine = Depends(get_engine)):
    """
    Playback progress callback. Playback surfaces should throttle these calls.
    """
    return engine.interaction_store.record_progress(request.video_id, request.progress)


@router.post("/reset", response_model=UserInteractions, response_model_by_alias=True)
def reset_interactions(engine: FeedEngine = Depends(get_engine)):
    logger.info("Resetting all user interactions")
    return engine.interaction_store.reset()
