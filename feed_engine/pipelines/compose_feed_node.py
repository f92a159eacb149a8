import logging

from feed_engine.models.pipeline_models import FeedRefreshState
from feed_engine.services.feed_composer import compose_feed

logger = logging.getLogger(__name__)


def compose_feed_node(state: FeedRefreshState) -> FeedRefreshState:
    """Merge the oracle order with the catalog into the final feed"""
    catalog = state.get("catalog") or []
    feed = compose_feed(catalog, state.get("ranked_ids"))

    state["feed"] = feed
    state["pipeline_step"] = "completed"
    logger.info(f"Feed composed: {len(feed)} videos from {len(catalog)} catalog records")
    return state
