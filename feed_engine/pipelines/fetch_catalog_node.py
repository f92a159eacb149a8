import logging

from langchain_core.runnables import RunnableConfig

from feed_engine.models.pipeline_models import FeedRefreshState
from feed_engine.services.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)


async def fetch_catalog_node(state: FeedRefreshState, config: RunnableConfig) -> FeedRefreshState:
    """
    Fetch the catalog. A failure is recorded in state["error"] and ends the pipeline.
    """
    catalog_service = config["configurable"]["catalog_service"]
    state["pipeline_step"] = "fetching_catalog"

    try:
        catalog = await catalog_service.fetch(use_cache=not state.get("hard_refresh", False))
    except CatalogUnavailableError as e:
        logger.error(f"Error in fetch_catalog_node: {str(e)}")
        state["error"] = str(e)
        state["pipeline_step"] = "error"
        return state

    state["catalog"] = catalog
    state["pipeline_step"] = "catalog_fetched"
    logger.info(f"Catalog fetched: {len(catalog)} videos")
    return state
