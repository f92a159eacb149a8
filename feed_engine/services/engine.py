"""
Wires the engine components together from settings
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from feed_engine.config import EngineSettings
from feed_engine.database.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    SupabaseKeyValueStore,
)
from feed_engine.database.supabase_client import SupabaseClient
from feed_engine.pipelines.refresh_orchestrator import FeedRefreshOrchestrator
from feed_engine.services.catalog_service import (
    CatalogService,
    CatalogSource,
    StaticCatalogSource,
    SupabaseCatalogSource,
)
from feed_engine.services.interaction_store import InteractionStore
from feed_engine.services.llm_oracle import (
    OpenAIRankingOracle,
    OpenAISearchOracle,
    RankingOracle,
    SearchOracle,
)
from feed_engine.services.search_engine import SearchEngine

logger = logging.getLogger(__name__)


@dataclass
class FeedEngine:
    interaction_store: InteractionStore
    catalog_service: CatalogService
    orchestrator: FeedRefreshOrchestrator
    search_engine: SearchEngine
    categories: List[str]


def build_kv_store(settings: EngineSettings, supabase: Optional[SupabaseClient]) -> KeyValueStore:
    backend = settings.store_backend
    if backend == "supabase":
        if supabase is None:
            raise ValueError("STORE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_ANON_KEY")
        return SupabaseKeyValueStore(supabase)
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend != "file":
        logger.warning(f"Unknown STORE_BACKEND {backend!r}, using file store")
    return JsonFileKeyValueStore(settings.store_file_path)


def build_catalog_source(settings: EngineSettings, supabase: Optional[SupabaseClient]) -> CatalogSource:
    if supabase is not None:
        return SupabaseCatalogSource(supabase)
    if settings.catalog_file:
        return StaticCatalogSource(path=settings.catalog_file)
    logger.warning("No catalog source configured (SUPABASE_URL or CATALOG_FILE), catalog will be empty")
    return StaticCatalogSource()


def create_engine(settings: EngineSettings,
                  kv_store: Optional[KeyValueStore] = None,
                  catalog_source: Optional[CatalogSource] = None,
                  ranking_oracle: Optional[RankingOracle] = None,
                  search_oracle: Optional[SearchOracle] = None) -> FeedEngine:
    """
    Build a FeedEngine. Explicit collaborators take precedence over the ones
    derived from settings.
    """
    supabase = None
    if settings.supabase_configured and (kv_store is None or catalog_source is None):
        supabase = SupabaseClient(
            settings.supabase_url,
            settings.supabase_key,
            videos_table=settings.supabase_videos_table,
            kv_table=settings.supabase_kv_table,
        )

    kv_store = kv_store or build_kv_store(settings, supabase)
    catalog_source = catalog_source or build_catalog_source(settings, supabase)
    ranking_oracle = ranking_oracle or OpenAIRankingOracle(
        settings.openai_api_key, settings.openai_model, settings.oracle_timeout_seconds
    )
    search_oracle = search_oracle or OpenAISearchOracle(
        settings.openai_api_key, settings.openai_model, settings.oracle_timeout_seconds
    )

    interaction_store = InteractionStore(kv_store, key=settings.interactions_key)
    catalog_service = CatalogService(
        catalog_source,
        kv_store,
        cache_key=settings.catalog_cache_key,
        ttl_seconds=settings.catalog_cache_ttl_seconds,
    )

    orchestrator = FeedRefreshOrchestrator(catalog_service, interaction_store, ranking_oracle)
    search_engine = SearchEngine(
        search_oracle,
        catalog_provider=lambda: orchestrator.feed,
        debounce_seconds=settings.search_debounce_seconds,
        oracle_timeout=settings.oracle_timeout_seconds,
    )
    orchestrator.search_engine = search_engine

    return FeedEngine(
        interaction_store=interaction_store,
        catalog_service=catalog_service,
        orchestrator=orchestrator,
        search_engine=search_engine,
        categories=list(settings.categories),
    )
