from fastapi import APIRouter, Depends, HTTPException

from feed_engine.api.dependencies import get_engine
from feed_engine.models.request_models import SearchRequest
from feed_engine.models.response_models import SearchResponse
from feed_engine.services.engine import FeedEngine
from feed_engine.services.errors import CatalogUnavailableError
from feed_engine.services.search_engine import SearchState

router = APIRouter()


def _to_response(state: SearchState) -> SearchResponse:
    return SearchResponse(
        query=state.query,
        sequence=state.sequence,
        phase=state.phase.value,
        videos=state.results,
    )


async def _ensure_feed(engine: FeedEngine) -> None:
    try:
        await engine.orchestrator.ensure_loaded()
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/", response_model=SearchResponse)
async def search_videos(request: SearchRequest, engine: FeedEngine = Depends(get_engine)):
    """Run a search immediately and return its result"""
    await _ensure_feed(engine)
    return _to_response(await engine.search_engine.search_now(request.query))


@router.post("/keystroke", response_model=SearchResponse)
async def search_keystroke(request: SearchRequest, engine: FeedEngine = Depends(get_engine)):
    """
    Register the current search-box text. The query runs after the quiet period;
    poll GET /search for the resolved state.
    """
    await _ensure_feed(engine)
    return _to_response(engine.search_engine.keystroke(request.query))


@router.get("/", response_model=SearchResponse)
def get_search_state(engine: FeedEngine = Depends(get_engine)):
    return _to_response(engine.search_engine.state)
