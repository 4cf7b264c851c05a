"""
Radar trends: items most often saved to users' radars recently.

Every insert counts, so a user who removes and re-adds an item counts
twice. Entries are grouped by exact (title, category).
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from toplists.config import RADAR_TRENDING_MONTHS, RADAR_TRENDING_LIMIT
from toplists.errors import InvalidOperation
from toplists.models import RadarEntry, subtract_months, utcnow
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


@dataclass
class TrendingRadarItem:
    title: str
    category: str
    count: int = 0
    image: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "category": self.category,
            "count": self.count,
            "image": self.image,
        }


def aggregate_radar_trends(
    entries: Iterable[RadarEntry],
    limit: int = RADAR_TRENDING_LIMIT,
) -> List[TrendingRadarItem]:
    """Count entries per (title, category); count desc, then title."""
    groups: Dict[Tuple[str, str], TrendingRadarItem] = {}

    for entry in entries:
        key = (entry.item_title, entry.category)
        item = groups.get(key)
        if item is None:
            item = groups[key] = TrendingRadarItem(title=entry.item_title, category=entry.category)
        item.count += 1
        if not item.image and entry.item_image:
            item.image = entry.item_image

    ordered = sorted(groups.values(), key=lambda i: (-i.count, i.title.casefold()))
    return ordered[:limit]


def trending_radar_items(
    storage: Storage,
    window_months: int = RADAR_TRENDING_MONTHS,
    now: Optional[datetime] = None,
) -> List[TrendingRadarItem]:
    """
    Radar trends over the trailing ``window_months`` calendar months.

    Args:
        storage: Backend to read entries from.
        window_months: Size of the window.
        now: End of the window (defaults to the current time).

    Raises:
        InvalidOperation: If window_months is below 1.
    """
    if window_months < 1:
        raise InvalidOperation("window_months must be at least 1")

    cutoff = subtract_months(now or utcnow(), window_months)
    entries = storage.get_radar_entries_since(cutoff)
    logger.debug("Radar trends: %d entries since %s", len(entries), cutoff.isoformat())
    return aggregate_radar_trends(entries)
