"""
Engine configuration loaded from environment variables with Pydantic Settings
(.env is loaded by the API entry point)
"""
import logging
from typing import Any, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from typing_extensions import Annotated

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Real Horror ✴️",
    "Animal Horror 🔱",
    "Terrifying Attacks ✴️",
    "Most Dangerous Scenes 🔱",
    "Garden Horror ⚠️",
    "Comedy Horror 😂 ⚠️",
    "Scary Moments",
]


class EngineSettings(BaseSettings):
    """Engine settings; env names are the field aliases, field names also work as kwargs"""

    # Oracles
    openai_api_key: Optional[str] = Field(None, validation_alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-4o-mini", validation_alias="OPENAI_MODEL")
    oracle_timeout_seconds: float = Field(20.0, validation_alias="ORACLE_TIMEOUT_SECONDS")

    # Supabase
    supabase_url: Optional[str] = Field(None, validation_alias="SUPABASE_URL")
    supabase_key: Optional[str] = Field(None, validation_alias="SUPABASE_ANON_KEY")
    supabase_videos_table: str = Field("videos", validation_alias="SUPABASE_VIDEOS_TABLE")
    supabase_kv_table: str = Field("kv_store", validation_alias="SUPABASE_KV_TABLE")

    # Key-value store
    store_backend: str = Field("file", validation_alias="STORE_BACKEND")  # memory | file | supabase
    store_file_path: str = Field(".feed_engine/store.json", validation_alias="STORE_FILE_PATH")
    interactions_key: str = Field("al-hadiqa-interactions-v5", validation_alias="INTERACTIONS_KEY")

    # Catalog
    catalog_file: Optional[str] = Field(None, validation_alias="CATALOG_FILE")
    catalog_cache_key: str = Field("app_videos_cache", validation_alias="CATALOG_CACHE_KEY")
    catalog_cache_ttl_seconds: float = Field(3600.0, validation_alias="CATALOG_CACHE_TTL_SECONDS")

    # Feed / search
    search_debounce_seconds: float = Field(0.6, validation_alias="SEARCH_DEBOUNCE_SECONDS")
    categories: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES), validation_alias="CATEGORY_LABELS"
    )
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("oracle_timeout_seconds", "catalog_cache_ttl_seconds",
                     "search_debounce_seconds", mode="wrap")
    @classmethod
    def _number_or_default(cls, value: Any, handler, info):
        try:
            return handler(value)
        except ValidationError:
            default = cls.model_fields[info.field_name].default
            logger.warning(f"Invalid value for {info.field_name}: {value!r}, using default {default}")
            return default

    @field_validator("openai_api_key", "supabase_url", "supabase_key", "catalog_file", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("categories", mode="before")
    @classmethod
    def _split_categories(cls, value: Any):
        if isinstance(value, str):
            value = [label.strip() for label in value.split("|")]
        if isinstance(value, list):
            value = [label for label in value if isinstance(label, str) and label.strip()]
        return value or list(DEFAULT_CATEGORIES)

    @field_validator("store_backend", mode="before")
    @classmethod
    def _lower(cls, value: Any):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, value: Any):
        return value.strip().upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls()

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)
