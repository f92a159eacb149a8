import logging

from langchain_core.runnables import RunnableConfig

from feed_engine.models.pipeline_models import FeedRefreshState

logger = logging.getLogger(__name__)


def clear_caches_node(state: FeedRefreshState, config: RunnableConfig) -> FeedRefreshState:
    """
    Drop every in-memory cache: the catalog copy and the current search session
    """
    services = config["configurable"]
    state["pipeline_step"] = "clearing_caches"

    services["catalog_service"].clear_memory_cache()
    search_engine = services.get("search_engine")
    if search_engine is not None:
        search_engine.reset()

    logger.info("In-memory caches cleared")
    state["pipeline_step"] = "caches_cleared"
    return state
