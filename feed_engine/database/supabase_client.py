from supabase import create_client, Client
from typing import List, Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    """
    Thin wrapper over the Supabase tables used by the engine:
    the catalog table and a key/value table holding persisted engine state
    """

    def __init__(self, url: Optional[str], key: Optional[str],
                 videos_table: str = "videos", kv_table: str = "kv_store"):
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment variables")

        self.videos_table = videos_table
        self.kv_table = kv_table
        self.client: Client = create_client(url, key)

    def get_catalog_videos(self) -> List[Dict[str, Any]]:
        """
        Fetch every catalog row. Errors propagate: a missing catalog is a hard failure.
        """
        response = self.client.table(self.videos_table).select(
            "id, public_id, title, category, type, video_url, poster_url"
        ).execute()

        rows = response.data or []
        logger.info(f"Fetched {len(rows)} catalog rows from {self.videos_table}")
        return rows

    def get_value(self, key: str) -> Optional[str]:
        response = self.client.table(self.kv_table).select("value").eq("key", key).limit(1).execute()

        if response.data:
            return response.data[0].get("value")
        return None

    def set_value(self, key: str, value: str) -> None:
        self.client.table(self.kv_table).upsert({"key": key, "value": value}).execute()

    def delete_value(self, key: str) -> None:
        self.client.table(self.kv_table).delete().eq("key", key).execute()
