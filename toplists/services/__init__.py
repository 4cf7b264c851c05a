"""
Services module.

Write-side operations: list authoring, engagement, radar and profiles.
"""

from toplists.services.lists import ListService, build_items
from toplists.services.engagement import EngagementService
from toplists.services.radar import RadarService
from toplists.services.profiles import ProfileService

__all__ = [
    "ListService",
    "build_items",
    "EngagementService",
    "RadarService",
    "ProfileService",
]
