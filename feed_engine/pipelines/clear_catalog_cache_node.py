import logging

from langchain_core.runnables import RunnableConfig

from feed_engine.models.pipeline_models import FeedRefreshState

logger = logging.getLogger(__name__)


def clear_catalog_cache_node(state: FeedRefreshState, config: RunnableConfig) -> FeedRefreshState:
    """Remove the persisted catalog cache entry"""
    config["configurable"]["catalog_service"].clear_persisted_cache()
    state["pipeline_step"] = "catalog_cache_cleared"
    logger.info("Persisted catalog cache cleared")
    return state
