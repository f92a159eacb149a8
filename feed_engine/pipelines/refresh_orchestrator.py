from typing import List, Optional
from datetime import datetime
import logging
from langgraph.graph import StateGraph, START, END

# LangSmith tracing
from langsmith import traceable

from feed_engine.models.pipeline_models import FeedRefreshState
from feed_engine.models.response_models import FeedRefreshResult
from feed_engine.models.video_models import VideoRecord
from feed_engine.services.catalog_service import CatalogService
from feed_engine.services.errors import CatalogUnavailableError
from feed_engine.services.interaction_store import InteractionStore
from feed_engine.services.llm_oracle import RankingOracle
from feed_engine.services.search_engine import SearchEngine
from feed_engine.pipelines.clear_caches_node import clear_caches_node
from feed_engine.pipelines.clear_catalog_cache_node import clear_catalog_cache_node
from feed_engine.pipelines.fetch_catalog_node import fetch_catalog_node
from feed_engine.pipelines.rank_feed_node import rank_feed_node
from feed_engine.pipelines.compose_feed_node import compose_feed_node

logger = logging.getLogger(__name__)


def _route_entry(state: FeedRefreshState) -> str:
    return "clear_caches" if state.get("hard_refresh") else "fetch_catalog"


def _route_after_fetch(state: FeedRefreshState) -> str:
    return END if state.get("error") else "rank_feed"


class FeedRefreshOrchestrator:
    """
    Runs the refresh pipeline and holds the current catalog and composed feed:
    1. (hard refresh) clear in-memory caches
    2. (hard refresh) clear the persisted catalog cache
    3. Fetch catalog (failure ends the run and is raised to the caller)
    4. Ask the ranking oracle for an order (failure keeps catalog order)
    5. Compose the feed
    """

    def __init__(self, catalog_service: CatalogService, interaction_store: InteractionStore,
                 ranking_oracle: Optional[RankingOracle] = None,
                 search_engine: Optional[SearchEngine] = None):
        self.catalog_service = catalog_service
        self.interaction_store = interaction_store
        self.ranking_oracle = ranking_oracle
        self.search_engine = search_engine

        self.catalog: List[VideoRecord] = []
        self.feed: List[VideoRecord] = []
        self.ranking_applied = False
        self.loaded = False
        self._refreshing = False

        self.graph = None
        self._build_graph()

    def _build_graph(self):
        """Build the refresh LangGraph workflow"""
        try:
            workflow = StateGraph(FeedRefreshState)

            workflow.add_node("clear_caches", clear_caches_node)
            workflow.add_node("clear_catalog_cache", clear_catalog_cache_node)
            workflow.add_node("fetch_catalog", fetch_catalog_node)
            workflow.add_node("rank_feed", rank_feed_node)
            workflow.add_node("compose_feed", compose_feed_node)

            workflow.add_conditional_edges(
                START, _route_entry,
                {"clear_caches": "clear_caches", "fetch_catalog": "fetch_catalog"},
            )
            workflow.add_edge("clear_caches", "clear_catalog_cache")
            workflow.add_edge("clear_catalog_cache", "fetch_catalog")
            workflow.add_conditional_edges(
                "fetch_catalog", _route_after_fetch,
                {"rank_feed": "rank_feed", END: END},
            )
            workflow.add_edge("rank_feed", "compose_feed")
            workflow.add_edge("compose_feed", END)

            self.graph = workflow.compile()
            logger.info("Feed refresh LangGraph workflow compiled successfully")

        except Exception as e:
            logger.error(f"Error building feed refresh workflow: {str(e)}")
            self.graph = None

    def _run_config(self):
        return {
            "configurable": {
                "catalog_service": self.catalog_service,
                "ranking_oracle": self.ranking_oracle,
                "search_engine": self.search_engine,
            }
        }

    async def _run_sequential(self, state: FeedRefreshState, config) -> FeedRefreshState:
        if state.get("hard_refresh"):
            state = clear_caches_node(state, config)
            state = clear_catalog_cache_node(state, config)
        state = await fetch_catalog_node(state, config)
        if state.get("error"):
            return state
        state = await rank_feed_node(state, config)
        return compose_feed_node(state)

    @traceable(name="feed_refresh_pipeline")
    async def refresh(self, hard: bool = False) -> FeedRefreshResult:
        """
        Fetch, rank and compose. A refresh requested while another is running
        returns the current feed without starting a second run.
        """
        if self._refreshing:
            logger.info("Refresh already in flight, skipping redundant request")
            return FeedRefreshResult(
                feed=list(self.feed),
                ranking_applied=self.ranking_applied,
                hard_refresh=hard,
                redundant=True,
            )

        self._refreshing = True
        start_time = datetime.utcnow()
        try:
            initial_state: FeedRefreshState = {
                "hard_refresh": hard,
                "interactions": self.interaction_store.state,
                "catalog": None,
                "ranked_ids": None,
                "ranking_applied": False,
                "feed": None,
                "pipeline_step": "initialized",
                "error": None,
                "execution_time": None,
            }
            config = self._run_config()

            if self.graph:
                result = await self.graph.ainvoke(initial_state, config=config)
            else:
                logger.warning("LangGraph workflow not available, using sequential execution")
                result = await self._run_sequential(initial_state, config)

            execution_time = (datetime.utcnow() - start_time).total_seconds()

            if result.get("error"):
                raise CatalogUnavailableError(result["error"])

            self.catalog = list(result.get("catalog") or [])
            self.feed = list(result.get("feed") or [])
            self.ranking_applied = bool(result.get("ranking_applied"))
            self.loaded = True

            logger.info(f"Feed refresh completed in {execution_time:.2f}s "
                        f"(hard={hard}, ranked={self.ranking_applied}, videos={len(self.feed)})")

            return FeedRefreshResult(
                feed=list(self.feed),
                ranking_applied=self.ranking_applied,
                hard_refresh=hard,
                execution_time=execution_time,
            )
        finally:
            self._refreshing = False

    async def ensure_loaded(self) -> List[VideoRecord]:
        """Run the initial load once; later calls return the current feed"""
        if not self.loaded:
            await self.refresh(hard=False)
        return list(self.feed)
