"""Most used categories, counted per (category, subcategory) pair."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from toplists.config import TOP_CATEGORIES_LIMIT
from toplists.models import TopList
from toplists.storage.base import Storage


@dataclass
class CategoryCount:
    """
    Attributes:
        name: Subcategory name when there is one, otherwise the category.
        category: Category name.
        subcategory: Subcategory name or None.
        lists_count: Number of lists in the group.
    """
    name: str
    category: str
    subcategory: Optional[str]
    lists_count: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "subcategory": self.subcategory,
            "listsCount": self.lists_count,
        }


def aggregate_top_categories(
    lists: Iterable[TopList],
    limit: int = TOP_CATEGORIES_LIMIT,
) -> List[CategoryCount]:
    """
    Count lists per (category, subcategory-or-none).

    Ordered by count desc, then display name. "Películas/Terror" and plain
    "Películas" are separate groups.
    """
    counts: Dict[Tuple[str, Optional[str]], CategoryCount] = {}

    for top_list in lists:
        key = (top_list.category, top_list.subcategory or None)
        group = counts.get(key)
        if group is None:
            group = counts[key] = CategoryCount(
                name=top_list.subcategory or top_list.category,
                category=top_list.category,
                subcategory=top_list.subcategory or None,
            )
        group.lists_count += 1

    ordered = sorted(counts.values(), key=lambda c: (-c.lists_count, c.name.casefold()))
    return ordered[:limit]


def top_categories(storage: Storage) -> List[CategoryCount]:
    return aggregate_top_categories(storage.get_lists())
