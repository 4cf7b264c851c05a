"""
Cross-list item leaderboards ("top items").

The same item shows up in many users' lists under slightly different
spellings ("Dune", "dune ", "DUNE"). Items are grouped per list category
by their trimmed, case-insensitive name and ranked by average rating.

The aggregation itself is a pure function over already-fetched lists;
top_items() is the storage-facing wrapper.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from toplists.config import TOP_ITEMS_PER_CATEGORY
from toplists.models import TopList
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


# =============================================================================
# Result Data Structures
# =============================================================================

@dataclass
class RankedItem:
    """
    One leaderboard row.

    Attributes:
        rank: Dense 1-based position inside its category.
        name: Spelling of the first occurrence seen.
        average_rating: Mean of the ratings of every occurrence.
        appearances: Number of lists the item was rated in.
        image: First non-empty image among the occurrences.
        description: First non-empty description among the occurrences.
    """
    rank: int
    name: str
    average_rating: float
    appearances: int
    image: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "name": self.name,
            "averageRating": self.average_rating,
            "appearances": self.appearances,
            "image": self.image,
            "description": self.description,
        }


@dataclass
class _ItemGroup:
    name: str
    ratings: List[float] = field(default_factory=list)
    image: str = ""
    description: str = ""

    @property
    def average(self) -> float:
        return sum(self.ratings) / len(self.ratings)


# =============================================================================
# Aggregation
# =============================================================================

def aggregate_top_items(
    lists: Iterable[TopList],
    category: Optional[str] = None,
    per_category: int = TOP_ITEMS_PER_CATEGORY,
) -> Dict[str, List[RankedItem]]:
    """
    Group rated items per category and rank them by average rating.

    Only items with rating > 0 count. Within a category, groups are ordered
    by average rating desc, then appearances desc, then name (casefolded).

    Args:
        lists: Lists with their items.
        category: If given, only this category is computed.
        per_category: Leaderboard size per category.

    Returns:
        Category name -> ranked items, categories in first-seen order.

    Example:
        >>> # "Dune" rated 8 and "dune" rated 6, both in Libros lists
        >>> aggregate_top_items(lists, "Libros")["Libros"][0].average_rating
        7.0
    """
    groups: Dict[str, Dict[str, _ItemGroup]] = {}

    for top_list in lists:
        if category is not None and top_list.category != category:
            continue
        for item in top_list.named_items:
            key = item.normalized_name
            if item.rating <= 0:
                continue

            by_name = groups.setdefault(top_list.category, {})
            group = by_name.get(key)
            if group is None:
                group = by_name[key] = _ItemGroup(name=item.name.strip())

            group.ratings.append(item.rating)
            if not group.image and item.image_url:
                group.image = item.image_url
            if not group.description and item.description:
                group.description = item.description

    result: Dict[str, List[RankedItem]] = {}
    for category_name, by_name in groups.items():
        ordered = sorted(by_name.values(), key=_group_sort_key)[:per_category]
        result[category_name] = [
            RankedItem(
                rank=rank,
                name=group.name,
                average_rating=group.average,
                appearances=len(group.ratings),
                image=group.image,
                description=group.description,
            )
            for rank, group in enumerate(ordered, start=1)
        ]
    return result


def _group_sort_key(group: _ItemGroup) -> Tuple[float, int, str]:
    return (-group.average, -len(group.ratings), group.name.casefold())


def top_items(storage: Storage, category: Optional[str] = None) -> Dict[str, List[RankedItem]]:
    """
    Leaderboards computed from every list in storage.

    Raises:
        StorageFailure: If lists cannot be fetched (no partial ranking).
    """
    lists = storage.get_lists()
    result = aggregate_top_items(lists, category=category)
    logger.debug("Top items computed for %d categories", len(result))
    return result
