"""
Social module.

Follow request workflow and the list visibility filter built on it.
"""

from toplists.social.follows import FollowManager, NEUTRAL_STATUS
from toplists.social.visibility import VisibilityFilter, is_list_visible

__all__ = [
    "FollowManager",
    "NEUTRAL_STATUS",
    "VisibilityFilter",
    "is_list_visible",
]
