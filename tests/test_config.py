import pytest

from feed_engine.config import DEFAULT_CATEGORIES, EngineSettings

ENV_NAMES = [
    "OPENAI_API_KEY", "OPENAI_MODEL", "ORACLE_TIMEOUT_SECONDS", "SUPABASE_URL",
    "SUPABASE_ANON_KEY", "STORE_BACKEND", "CATALOG_FILE", "CATALOG_CACHE_TTL_SECONDS",
    "SEARCH_DEBOUNCE_SECONDS", "CATEGORY_LABELS", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = EngineSettings.from_env()
    assert settings.openai_api_key is None
    assert settings.store_backend == "file"
    assert settings.search_debounce_seconds == 0.6
    assert settings.categories == DEFAULT_CATEGORIES
    assert not settings.supabase_configured


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-live")
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("STORE_BACKEND", "Supabase")
    monkeypatch.setenv("SEARCH_DEBOUNCE_SECONDS", "0.25")
    monkeypatch.setenv("CATEGORY_LABELS", "Real Horror | | Scary Moments")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = EngineSettings.from_env()

    assert settings.openai_api_key == "sk-live"
    assert settings.supabase_configured
    assert settings.store_backend == "supabase"
    assert settings.search_debounce_seconds == 0.25
    assert settings.categories == ["Real Horror", "Scary Moments"]
    assert settings.log_level == "DEBUG"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("ORACLE_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("CATALOG_CACHE_TTL_SECONDS", "")

    settings = EngineSettings.from_env()

    assert settings.oracle_timeout_seconds == 20.0
    assert settings.catalog_cache_ttl_seconds == 3600.0


def test_blank_values_count_as_unset(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("CATEGORY_LABELS", " | ")

    settings = EngineSettings.from_env()

    assert settings.openai_api_key is None
    assert settings.categories == DEFAULT_CATEGORIES


def test_field_names_work_as_keyword_arguments():
    settings = EngineSettings(store_backend="MEMORY", search_debounce_seconds=0.01)
    assert settings.store_backend == "memory"
    assert settings.search_debounce_seconds == 0.01
