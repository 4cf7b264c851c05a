"""
Ranking module.

Leaderboards computed from stored lists and radar entries.
"""

from toplists.ranking.top_items import RankedItem, aggregate_top_items, top_items
from toplists.ranking.top_categories import CategoryCount, aggregate_top_categories, top_categories
from toplists.ranking.radar_trends import (
    TrendingRadarItem,
    aggregate_radar_trends,
    trending_radar_items,
)

__all__ = [
    "RankedItem",
    "aggregate_top_items",
    "top_items",
    "CategoryCount",
    "aggregate_top_categories",
    "top_categories",
    "TrendingRadarItem",
    "aggregate_radar_trends",
    "trending_radar_items",
]
