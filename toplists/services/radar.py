"""
Personal radar: items a user wants to try later.

Duplicates are not rejected here; clients call check() before adding.
"""

import logging
from typing import List, Optional

from toplists.errors import InvalidOperation, NotFound
from toplists.logging_util import mask_id
from toplists.models import RadarEntry
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else ""


class RadarService:
    """CRUD over a user's own radar entries."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def _owned_entry(self, entry_id: str, user_id: str) -> RadarEntry:
        entry = self.storage.get_radar_entry(entry_id)
        if entry is None or entry.user_id != user_id:
            raise NotFound("Radar item not found or unauthorized")
        return entry

    def add(self, user_id: str, payload: dict) -> RadarEntry:
        """
        Save an item to the user's radar.

        Payload keys: itemTitle, category (required), itemDescription,
        itemImage, listId, listTitle, notes.

        Raises:
            InvalidOperation: If itemTitle or category is missing.
        """
        if not isinstance(payload, dict):
            raise InvalidOperation("Request body must be a JSON object")

        title = _text(payload, "itemTitle")
        category = _text(payload, "category")
        if not title or not category:
            raise InvalidOperation("itemTitle and category are required")

        entry = self.storage.add_radar_entry(RadarEntry(
            user_id=user_id,
            item_title=title,
            category=category,
            item_description=_text(payload, "itemDescription"),
            item_image=_text(payload, "itemImage"),
            list_id=_text(payload, "listId"),
            list_title=_text(payload, "listTitle"),
            notes=_text(payload, "notes"),
        ))
        logger.info("Radar item %s '%s' added for %s", mask_id(entry.id), title, mask_id(user_id))
        return entry

    def list_for(self, user_id: str) -> List[RadarEntry]:
        return self.storage.get_radar_entries(user_id)

    def update_notes(self, entry_id: str, user_id: str, notes: Optional[str]) -> RadarEntry:
        """
        Raises:
            NotFound: If the entry is missing or belongs to someone else.
        """
        entry = self._owned_entry(entry_id, user_id)
        entry.notes = (notes or "").strip() if isinstance(notes, str) else ""
        updated = self.storage.update_radar_entry(entry)
        logger.info("Radar item %s notes updated", mask_id(entry_id))
        return updated

    def remove(self, entry_id: str, user_id: str) -> None:
        """
        Raises:
            NotFound: If the entry is missing or belongs to someone else.
        """
        self._owned_entry(entry_id, user_id)
        self.storage.delete_radar_entry(entry_id)
        logger.info("Radar item %s removed", mask_id(entry_id))

    def check(self, user_id: str, item_title: Optional[str], category: Optional[str]) -> dict:
        """
        Whether the user already has this (title, category) on the radar.

        Raises:
            InvalidOperation: If title or category is missing.
        """
        if not item_title or not category:
            raise InvalidOperation("itemTitle and category are required")
        entry = self.storage.find_radar_entry(user_id, item_title, category)
        return {"inRadar": entry is not None, "radarItemId": entry.id if entry else None}
