from __future__ import annotations

import logging

from equipdash.config import Settings
from equipdash.store.base import RecordStore
from equipdash.store.memory import MemoryStore

logger = logging.getLogger(__name__)


def open_store(settings: Settings) -> RecordStore:
    """
    Build the store selected by EQUIPDASH_STORE.
    """
    if settings.store == "supabase":
        # imported here so the memory backend never pulls in the SDK
        from equipdash.store.supabase_store import SupabaseStore

        logger.info("Using Supabase store at %s", settings.supabase_url)
        return SupabaseStore.connect(settings.supabase_url, settings.supabase_key)

    if settings.seed_path:
        return MemoryStore.from_json(settings.seed_path)

    logger.info("Using empty memory store")
    return MemoryStore()
