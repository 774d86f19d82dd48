from .base import SeasonStore, clean_search_text
from .memory import InMemoryStore
from .supabase import SupabaseStore

__all__ = ["SeasonStore", "clean_search_text", "InMemoryStore", "SupabaseStore", "build_store"]


def build_store(settings) -> SeasonStore:
    """Pick the store implementation from settings.data_source (fixture | supabase)."""
    if settings.data_source == "supabase":
        return SupabaseStore(settings.supabase_url, settings.supabase_key, timeout=settings.store_timeout)
    return InMemoryStore.from_json_file(settings.fixture_path)
