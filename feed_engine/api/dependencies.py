from functools import lru_cache

from feed_engine.config import EngineSettings
from feed_engine.services.engine import FeedEngine, create_engine


@lru_cache
def get_engine() -> FeedEngine:
    """Single engine per process; override in tests via app.dependency_overrides"""
    return create_engine(EngineSettings.from_env())
