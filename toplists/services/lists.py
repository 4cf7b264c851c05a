"""
List authoring: create, edit and delete a user's top lists.

Incoming item payloads use the client's field names::

    {"name": "Dune", "description": "...", "image": "https://...",
     "rating": 8.5, "ratings": {"trama": 4.5, "personajes": 4}}

Items with a blank name are dropped and the rest are ranked 1..n in the
order received. An item without a rating but with sub-ratings gets the
average of its sub-ratings on the 0-10 scale.
"""

import logging
from typing import Any, List, Optional

from toplists.criteria import DEFAULT_CATEGORY, average_rating, validate_sub_ratings
from toplists.errors import InvalidOperation, NotFound
from toplists.logging_util import mask_id
from toplists.models import MIN_NAMED_ITEMS, ListItem, TopList
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def build_items(category: Optional[str], raw_items: Any) -> List[ListItem]:
    """
    Turn a client item payload into densely ranked ListItems.

    Raises:
        InvalidOperation: On malformed items, bad ratings, or fewer than
            MIN_NAMED_ITEMS named items.
    """
    if not isinstance(raw_items, list):
        raise InvalidOperation("items must be a list")

    items: List[ListItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise InvalidOperation("each item must be an object")

        name = _text(raw.get("name") or raw.get("title"))
        if not name:
            continue

        ratings = validate_sub_ratings(category, raw.get("ratings"))
        rating = raw.get("rating")
        if not rating and ratings:
            rating = average_rating(ratings)
        if isinstance(rating, bool) or not isinstance(rating, (int, float, type(None))):
            raise InvalidOperation(f"rating of '{name}' must be a number")

        try:
            items.append(ListItem(
                name=name,
                rank=len(items) + 1,
                rating=float(rating or 0),
                ratings=ratings,
                description=_text(raw.get("description")),
                image_url=_text(raw.get("image") or raw.get("image_url")),
            ))
        except ValueError as e:
            raise InvalidOperation(str(e)) from e

    if len(items) < MIN_NAMED_ITEMS:
        raise InvalidOperation(f"A list needs at least {MIN_NAMED_ITEMS} items with a name")
    return items


class ListService:
    """Owner-side operations on lists."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def _owned_list(self, list_id: str, owner_id: str) -> TopList:
        top_list = self.storage.get_list(list_id)
        if top_list is None or top_list.owner_id != owner_id:
            raise NotFound("List not found or unauthorized")
        return top_list

    @staticmethod
    def _fields(payload: dict) -> dict:
        if not isinstance(payload, dict):
            raise InvalidOperation("Request body must be a JSON object")

        title = _text(payload.get("title"))
        if not title:
            raise InvalidOperation("title is required")

        category = _text(payload.get("category")) or DEFAULT_CATEGORY
        return {
            "title": title,
            "category": category,
            "subcategory": _text(payload.get("subcategory")) or None,
            "description": _text(payload.get("description")),
            "items": build_items(category, payload.get("items")),
        }

    def create_list(self, owner_id: str, payload: dict) -> TopList:
        """
        Raises:
            InvalidOperation: Missing title or fewer than 3 named items.
        """
        top_list = TopList(owner_id=owner_id, **self._fields(payload))
        created = self.storage.add_list(top_list)
        logger.info(
            "Created list %s '%s' (%d items) for %s",
            mask_id(created.id), created.title, len(created.items), mask_id(owner_id),
        )
        return created

    def update_list(self, list_id: str, owner_id: str, payload: dict) -> TopList:
        """
        Replace metadata and items of an owned list.

        Raises:
            NotFound: If the list is missing or owned by someone else.
            InvalidOperation: Same rules as create_list().
        """
        existing = self._owned_list(list_id, owner_id)
        updated = TopList(
            id=existing.id,
            owner_id=existing.owner_id,
            created_at=existing.created_at,
            **self._fields(payload),
        )
        result = self.storage.replace_list(updated)
        logger.info("Updated list %s", mask_id(list_id))
        return result

    def delete_list(self, list_id: str, owner_id: str) -> None:
        """
        Raises:
            NotFound: If the list is missing or owned by someone else.
        """
        self._owned_list(list_id, owner_id)
        self.storage.delete_list(list_id)
        logger.info("Deleted list %s", mask_id(list_id))
