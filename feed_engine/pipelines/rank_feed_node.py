import logging

from langchain_core.runnables import RunnableConfig

from feed_engine.models.pipeline_models import FeedRefreshState
from feed_engine.services.feed_composer import request_ranking

logger = logging.getLogger(__name__)


async def rank_feed_node(state: FeedRefreshState, config: RunnableConfig) -> FeedRefreshState:
    """
    Ask the ranking oracle for an order. Failure leaves ranked_ids empty so the
    feed keeps catalog order.
    """
    state["pipeline_step"] = "ranking"
    ranked_ids = await request_ranking(
        catalog=state.get("catalog") or [],
        interactions=state["interactions"],
        oracle=config["configurable"].get("ranking_oracle"),
    )

    state["ranked_ids"] = ranked_ids or []
    state["ranking_applied"] = ranked_ids is not None
    state["pipeline_step"] = "ranked"

    if ranked_ids is None:
        logger.warning("Ranking unavailable, feed will use catalog order")
    else:
        logger.info(f"Ranking oracle ordered {len(ranked_ids)} ids")
    return state
