"""
Radar entry model.

The radar is a user's personal watch list: items spotted in someone's list
that the user wants to try later. The link back to the originating list is
informational only.
"""

from dataclasses import dataclass, field
from datetime import datetime
import uuid

from toplists.models.timestamps import utcnow, format_timestamp


@dataclass
class RadarEntry:
    """
    Attributes:
        user_id: Owner of the radar.
        item_title: Title of the tracked item.
        category: Category of the list the item came from.
        item_description: Copied item description.
        item_image: Copied item image.
        list_id: Originating list (may be empty or point to a deleted list).
        list_title: Originating list title at the time of saving.
        notes: Free-text notes the user can edit later.
        id: Row id.
        added_at: Insert time; drives the radar trending window.
    """

    user_id: str
    item_title: str
    category: str
    item_description: str = ""
    item_image: str = ""
    list_id: str = ""
    list_title: str = ""
    notes: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    added_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        errors = []
        if not self.user_id:
            errors.append("user_id is required")
        if not self.item_title or not self.item_title.strip():
            errors.append("item_title is required")
        if not self.category or not self.category.strip():
            errors.append("category is required")
        if errors:
            raise ValueError(f"RadarEntry validation failed: {'; '.join(errors)}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "itemTitle": self.item_title,
            "itemDescription": self.item_description,
            "itemImage": self.item_image,
            "category": self.category,
            "listId": self.list_id,
            "listTitle": self.list_title,
            "notes": self.notes,
            "addedAt": format_timestamp(self.added_at),
        }
