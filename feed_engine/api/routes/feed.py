from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List
import logging

from feed_engine.api.dependencies import get_engine
from feed_engine.models.interaction_models import Continuation
from feed_engine.models.request_models import RefreshRequest
from feed_engine.models.response_models import FeedRefreshResult, FeedResponse, HomeView
from feed_engine.models.video_models import VideoRecord
from feed_engine.services.continuation_selector import select_continuations
from feed_engine.services.engine import FeedEngine
from feed_engine.services.errors import CatalogUnavailableError
from feed_engine.services.feed_views import (
    LIBRARY_KINDS,
    build_home,
    library_view,
    video_card,
    visible_feed,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def _loaded_feed(engine: FeedEngine) -> List[VideoRecord]:
    try:
        return await engine.orchestrator.ensure_loaded()
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/", response_model=FeedResponse)
async def get_feed(
    include_hidden: bool = Query(False, description="Include disliked videos"),
    engine: FeedEngine = Depends(get_engine),
):
    feed = await _loaded_feed(engine)
    if not include_hidden:
        feed = visible_feed(feed, engine.interaction_store.state)
    return FeedResponse(videos=[video_card(v) for v in feed], total=len(feed))


@router.post("/refresh", response_model=FeedRefreshResult)
async def refresh_feed(request: RefreshRequest, engine: FeedEngine = Depends(get_engine)):
    """
    Re-fetch the catalog, re-rank and recompose. hard=true clears every cache first.
    """
    try:
        return await engine.orchestrator.refresh(hard=request.hard)
    except CatalogUnavailableError as e:
        logger.error(f"Feed refresh failed: {str(e)}")
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/home", response_model=HomeView)
async def get_home(engine: FeedEngine = Depends(get_engine)):
    feed = await _loaded_feed(engine)
    return build_home(feed, engine.interaction_store.state, engine.categories)


@router.get("/continue-watching", response_model=List[Continuation])
async def get_continue_watching(engine: FeedEngine = Depends(get_engine)):
    feed = await _loaded_feed(engine)
    return select_continuations(engine.interaction_store.state.watch_history, feed)


@router.get("/library/{kind}", response_model=List[VideoRecord])
async def get_library(kind: str, engine: FeedEngine = Depends(get_engine)):
    if kind not in LIBRARY_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown library: {kind}")
    feed = await _loaded_feed(engine)
    return library_view(kind, feed, engine.interaction_store.state)
