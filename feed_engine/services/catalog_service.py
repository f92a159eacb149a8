import asyncio
import json
import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError

from feed_engine.database.kv_store import KeyValueStore
from feed_engine.database.supabase_client import SupabaseClient
from feed_engine.models.video_models import VideoRecord
from feed_engine.services.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    async def fetch(self) -> List[VideoRecord]:
        ...


def records_from_rows(rows: Iterable[Dict[str, Any]]) -> List[VideoRecord]:
    """
    Convert raw catalog rows to records, skipping rows without an id or with an unknown type
    """
    records = []
    skipped = 0
    for row in rows:
        try:
            if not row.get("id"):
                skipped += 1
                continue
            records.append(VideoRecord.model_validate(row))
        except (ValidationError, AttributeError) as e:
            logger.warning(f"Skipping malformed catalog row: {str(e)}")
            skipped += 1

    if skipped:
        logger.warning(f"Skipped {skipped} catalog rows")
    return records


class StaticCatalogSource:
    """Catalog held in memory or loaded from a JSON file of rows"""

    def __init__(self, videos: Optional[List[VideoRecord]] = None, path: Optional[str] = None):
        self.videos = list(videos or [])
        self.path = path

    async def fetch(self) -> List[VideoRecord]:
        if self.path:
            with open(self.path, "r", encoding="utf-8") as fh:
                rows = json.load(fh)
            return records_from_rows(rows)
        return list(self.videos)


class SupabaseCatalogSource:
    """Catalog rows from the Supabase videos table"""

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def fetch(self) -> List[VideoRecord]:
        rows = await asyncio.to_thread(self.client.get_catalog_videos)
        return records_from_rows(rows)


class CatalogService:
    """
    Fetches the catalog through an in-memory copy and a persisted copy kept
    in the key/value store, falling through to the source.
    """

    def __init__(self, source: CatalogSource, kv_store: KeyValueStore,
                 cache_key: str = "app_videos_cache", ttl_seconds: float = 3600.0):
        self.source = source
        self.kv_store = kv_store
        self.cache_key = cache_key
        self.ttl_seconds = ttl_seconds
        self._memory: Optional[List[VideoRecord]] = None

    async def fetch(self, use_cache: bool = True) -> List[VideoRecord]:
        if use_cache:
            if self._memory is not None:
                return list(self._memory)

            cached = self._read_persisted()
            if cached is not None:
                logger.info(f"Serving {len(cached)} catalog records from persisted cache")
                self._memory = cached
                return list(cached)

        try:
            videos = await self.source.fetch()
        except Exception as e:
            logger.error(f"Catalog fetch failed: {str(e)}")
            raise CatalogUnavailableError(f"Catalog fetch failed: {str(e)}") from e

        self._memory = list(videos)
        self._write_persisted(videos)
        logger.info(f"Fetched {len(videos)} catalog records from source")
        return list(videos)

    def clear_memory_cache(self) -> None:
        self._memory = None

    def clear_persisted_cache(self) -> None:
        try:
            self.kv_store.delete(self.cache_key)
        except Exception as e:
            logger.error(f"Error clearing persisted catalog cache: {str(e)}")

    def _read_persisted(self) -> Optional[List[VideoRecord]]:
        try:
            raw = self.kv_store.get(self.cache_key)
        except Exception as e:
            logger.warning(f"Error reading persisted catalog cache: {str(e)}")
            return None
        if not raw:
            return None

        try:
            payload = json.loads(raw)
            cached_at = float(payload["cached_at"])
            rows = payload["videos"]
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Ignoring corrupt catalog cache entry: {str(e)}")
            return None

        if not isinstance(rows, list):
            logger.warning(f"Ignoring corrupt catalog cache entry: videos is {type(rows).__name__}")
            return None

        if time.time() - cached_at > self.ttl_seconds:
            logger.info("Persisted catalog cache expired")
            return None
        return records_from_rows(rows)

    def _write_persisted(self, videos: List[VideoRecord]) -> None:
        payload = {
            "cached_at": time.time(),
            "videos": [v.model_dump(mode="json") for v in videos],
        }
        try:
            self.kv_store.set(self.cache_key, json.dumps(payload, ensure_ascii=False))
        except Exception as e:
            logger.error(f"Error writing persisted catalog cache: {str(e)}")
