"""
Data models module.

Defines data structures for users, lists, social facts and radar entries.
"""

from toplists.models.user import User, DEFAULT_AVATAR_URL
from toplists.models.top_list import TopList, ListItem, MIN_NAMED_ITEMS
from toplists.models.social import FollowEdge, FollowStatus, Like, Favorite, Comment
from toplists.models.radar_entry import RadarEntry
from toplists.models.feed_entry import FeedEntry
from toplists.models.timestamps import utcnow, parse_timestamp, format_timestamp, subtract_months

__all__ = [
    "User",
    "DEFAULT_AVATAR_URL",
    "TopList",
    "ListItem",
    "MIN_NAMED_ITEMS",
    "FollowEdge",
    "FollowStatus",
    "Like",
    "Favorite",
    "Comment",
    "RadarEntry",
    "FeedEntry",
    "utcnow",
    "parse_timestamp",
    "format_timestamp",
    "subtract_months",
]
