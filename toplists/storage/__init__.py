"""
Storage module.

Handles persistence and retrieval of users, lists and social facts via
Supabase or an in-process store.
"""

import logging

from toplists.config import is_supabase_configured
from toplists.storage.base import Storage
from toplists.storage.memory import MemoryStorage
from toplists.storage.supabase import SupabaseStorage

logger = logging.getLogger(__name__)


def create_storage() -> Storage:
    """
    Build the storage backend for the current configuration.

    Supabase when its URL and service key are set, otherwise an empty
    MemoryStorage (local development only; data is lost on exit).
    """
    if is_supabase_configured():
        return SupabaseStorage()
    logger.warning("Supabase is not configured, using in-memory storage")
    return MemoryStorage()


__all__ = [
    "Storage",
    "MemoryStorage",
    "SupabaseStorage",
    "create_storage",
]
