"""
Top list data model for TopLists.

A TopList is an owned, ranked sequence of ListItems in one category
(optionally a subcategory). Items are densely ranked 1..n in display order.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
import uuid

from toplists.criteria import DEFAULT_CATEGORY
from toplists.models.timestamps import utcnow, format_timestamp


# Minimum number of named items a list must hold to be created or edited
MIN_NAMED_ITEMS = 3

RATING_MIN: float = 0.0
RATING_MAX: float = 10.0


@dataclass
class ListItem:
    """
    One ranked entry of a list.

    Attributes:
        name: Display name ("Dune", "The Godfather", ...).
        rank: 1-based position inside the list.
        rating: Overall score in [0, 10]. 0 means "not rated".
        ratings: Optional sub-criterion scores (criterion key -> 0..5).
        description: Free text.
        image_url: Cover image.
        id: Row id.
        list_id: Owning list id.
    """

    name: str
    rank: int = 1
    rating: float = 0.0
    ratings: dict = field(default_factory=dict)
    description: str = ""
    image_url: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    list_id: str = ""

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ValueError: If rating or rank is out of range.
        """
        errors = []
        if not (RATING_MIN <= self.rating <= RATING_MAX):
            errors.append(f"rating must be between {RATING_MIN:g} and {RATING_MAX:g}, got {self.rating}")
        if self.rank < 1:
            errors.append(f"rank must be at least 1, got {self.rank}")
        if errors:
            raise ValueError(f"ListItem validation failed: {'; '.join(errors)}")

    @property
    def has_name(self) -> bool:
        return bool(self.name and self.name.strip())

    @property
    def normalized_name(self) -> str:
        """Grouping key used by the cross-list leaderboards."""
        return (self.name or "").strip().lower()

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "title": self.name,
            "name": self.name,
            "rating": self.rating,
            "ratings": dict(self.ratings or {}),
            "image": self.image_url,
            "description": self.description,
        }


@dataclass
class TopList:
    """
    A user's ranked list.

    Attributes:
        owner_id: Id of the creating user (only they can edit or delete it).
        title: List title.
        category: Category display name ("Películas", "Libros", ...).
        subcategory: Optional subcategory ("Terror", ...).
        description: Free text.
        items: Ranked items, kept sorted by rank.
        id: Row id.
        created_at: Creation time; drives "newest first" feeds.
    """

    owner_id: str
    title: str
    category: str = DEFAULT_CATEGORY
    subcategory: Optional[str] = None
    description: str = ""
    items: list[ListItem] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.category:
            self.category = DEFAULT_CATEGORY
        if not self.subcategory:
            self.subcategory = None
        self.items = sorted(self.items, key=lambda i: i.rank)
        for item in self.items:
            item.list_id = self.id
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ValueError: If owner or title is missing.
        """
        errors = []
        if not self.owner_id:
            errors.append("owner_id is required")
        if not self.title or not self.title.strip():
            errors.append("title is required and cannot be empty")
        if errors:
            raise ValueError(f"TopList validation failed: {'; '.join(errors)}")

    @property
    def named_items(self) -> list[ListItem]:
        return [item for item in self.items if item.has_name]

    @property
    def cover_image(self) -> str:
        """First item's image, used as the card cover."""
        if self.items:
            return self.items[0].image_url or ""
        return ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "subcategory": self.subcategory,
            "genre": self.subcategory,
            "title": self.title,
            "description": self.description,
            "items": [item.to_dict() for item in self.items],
            "coverImage": self.cover_image,
            "createdAt": format_timestamp(self.created_at),
        }

    def __str__(self) -> str:
        return f"[{self.category}] {self.title} ({len(self.items)} items)"

    def __repr__(self) -> str:
        return (
            f"TopList(id={self.id!r}, title={self.title!r}, "
            f"owner_id={self.owner_id!r}, category={self.category!r})"
        )
