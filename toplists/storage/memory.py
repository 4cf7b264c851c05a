"""
In-memory storage backend for TopLists.

Use this when Supabase is not configured or for testing.
Data is stored in memory and lost when the process ends. Records are
copied on the way in and on the way out so callers never share state
with the store.
"""

import copy
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from toplists.models import (
    Comment,
    Favorite,
    FollowEdge,
    FollowStatus,
    Like,
    RadarEntry,
    TopList,
    User,
)
from toplists.storage.base import Storage


def _newest_first(records, attr: str = "created_at") -> list:
    return sorted(records, key=lambda r: getattr(r, attr), reverse=True)


class MemoryStorage(Storage):
    """Dict-backed implementation of the Storage interface."""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lists: Dict[str, TopList] = {}
        self._follows: Dict[str, FollowEdge] = {}
        self._likes: Dict[str, Like] = {}
        self._favorites: Dict[str, Favorite] = {}
        self._comments: Dict[str, Comment] = {}
        self._radar: Dict[str, RadarEntry] = {}

    @property
    def name(self) -> str:
        return "memory"

    # =========================================================================
    # Users
    # =========================================================================

    def get_user(self, user_id: str) -> Optional[User]:
        return copy.deepcopy(self._users.get(user_id))

    def get_users(self, user_ids: Iterable[str]) -> List[User]:
        return [copy.deepcopy(self._users[uid]) for uid in dict.fromkeys(user_ids) if uid in self._users]

    def find_user_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return copy.deepcopy(user)
        return None

    def add_user(self, user: User) -> User:
        self._users[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    def update_user(self, user: User) -> User:
        self._users[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    def list_users(self, limit: int, exclude_ids: Iterable[str] = ()) -> List[User]:
        excluded = set(exclude_ids)
        users = [u for u in self._users.values() if u.id not in excluded]
        return copy.deepcopy(users[:limit])

    def search_users(self, query: str, limit: int) -> List[User]:
        needle = query.lower()
        users = [u for u in self._users.values() if needle in u.username.lower()]
        return copy.deepcopy(users[:limit])

    # =========================================================================
    # Lists
    # =========================================================================

    def get_list(self, list_id: str) -> Optional[TopList]:
        return copy.deepcopy(self._lists.get(list_id))

    def get_lists(
        self,
        owner_ids: Optional[Iterable[str]] = None,
        list_ids: Optional[Iterable[str]] = None,
    ) -> List[TopList]:
        lists = list(self._lists.values())
        if owner_ids is not None:
            owners = set(owner_ids)
            lists = [tl for tl in lists if tl.owner_id in owners]
        if list_ids is not None:
            wanted = set(list_ids)
            lists = [tl for tl in lists if tl.id in wanted]
        return copy.deepcopy(_newest_first(lists))

    def add_list(self, top_list: TopList) -> TopList:
        self._lists[top_list.id] = copy.deepcopy(top_list)
        return copy.deepcopy(top_list)

    def replace_list(self, top_list: TopList) -> TopList:
        return self.add_list(top_list)

    def delete_list(self, list_id: str) -> None:
        self._lists.pop(list_id, None)

    def search_lists(self, query: str, limit: int) -> List[TopList]:
        needle = query.lower()
        lists = [
            tl for tl in self._lists.values()
            if needle in tl.title.lower() or needle in (tl.description or "").lower()
        ]
        return copy.deepcopy(_newest_first(lists)[:limit])

    # =========================================================================
    # Follow edges
    # =========================================================================

    def get_follow(self, follower_id: str, followed_id: str) -> Optional[FollowEdge]:
        for edge in self._follows.values():
            if edge.follower_id == follower_id and edge.followed_id == followed_id:
                return copy.deepcopy(edge)
        return None

    def get_follow_by_id(self, edge_id: str) -> Optional[FollowEdge]:
        return copy.deepcopy(self._follows.get(edge_id))

    def get_follows(
        self,
        follower_id: Optional[str] = None,
        followed_id: Optional[str] = None,
        status: Optional[FollowStatus] = None,
    ) -> List[FollowEdge]:
        edges = [
            e for e in self._follows.values()
            if (follower_id is None or e.follower_id == follower_id)
            and (followed_id is None or e.followed_id == followed_id)
            and (status is None or e.status == status)
        ]
        return copy.deepcopy(_newest_first(edges))

    def add_follow(self, edge: FollowEdge) -> FollowEdge:
        self._follows[edge.id] = copy.deepcopy(edge)
        return copy.deepcopy(edge)

    def set_follow_status(self, edge_id: str, status: FollowStatus) -> None:
        if edge_id in self._follows:
            self._follows[edge_id].status = FollowStatus(status)

    def delete_follow(self, edge_id: str) -> None:
        self._follows.pop(edge_id, None)

    # =========================================================================
    # Likes
    # =========================================================================

    def find_like(self, user_id: str, list_id: str) -> Optional[Like]:
        for like in self._likes.values():
            if like.user_id == user_id and like.list_id == list_id:
                return copy.deepcopy(like)
        return None

    def add_like(self, like: Like) -> Like:
        self._likes[like.id] = copy.deepcopy(like)
        return copy.deepcopy(like)

    def delete_like(self, user_id: str, list_id: str) -> None:
        for like_id, like in list(self._likes.items()):
            if like.user_id == user_id and like.list_id == list_id:
                del self._likes[like_id]

    def count_likes(self, list_ids: Iterable[str]) -> Dict[str, int]:
        counts = {list_id: 0 for list_id in list_ids}
        for like in self._likes.values():
            if like.list_id in counts:
                counts[like.list_id] += 1
        return counts

    # =========================================================================
    # Favorites
    # =========================================================================

    def find_favorite(self, user_id: str, list_id: str) -> Optional[Favorite]:
        for fav in self._favorites.values():
            if fav.user_id == user_id and fav.list_id == list_id:
                return copy.deepcopy(fav)
        return None

    def add_favorite(self, favorite: Favorite) -> Favorite:
        self._favorites[favorite.id] = copy.deepcopy(favorite)
        return copy.deepcopy(favorite)

    def delete_favorite(self, user_id: str, list_id: str) -> None:
        for fav_id, fav in list(self._favorites.items()):
            if fav.user_id == user_id and fav.list_id == list_id:
                del self._favorites[fav_id]

    def get_favorites(self, user_id: str) -> List[Favorite]:
        favorites = [f for f in self._favorites.values() if f.user_id == user_id]
        return copy.deepcopy(_newest_first(favorites))

    # =========================================================================
    # Comments
    # =========================================================================

    def get_comment(self, comment_id: str) -> Optional[Comment]:
        return copy.deepcopy(self._comments.get(comment_id))

    def get_comments(self, list_id: str) -> List[Comment]:
        comments = [c for c in self._comments.values() if c.list_id == list_id]
        return copy.deepcopy(_newest_first(comments))

    def add_comment(self, comment: Comment) -> Comment:
        self._comments[comment.id] = copy.deepcopy(comment)
        return copy.deepcopy(comment)

    def delete_comment(self, comment_id: str) -> None:
        self._comments.pop(comment_id, None)

    def count_comments(self, list_ids: Iterable[str]) -> Dict[str, int]:
        counts = {list_id: 0 for list_id in list_ids}
        for comment in self._comments.values():
            if comment.list_id in counts:
                counts[comment.list_id] += 1
        return counts

    # =========================================================================
    # Radar
    # =========================================================================

    def add_radar_entry(self, entry: RadarEntry) -> RadarEntry:
        self._radar[entry.id] = copy.deepcopy(entry)
        return copy.deepcopy(entry)

    def get_radar_entry(self, entry_id: str) -> Optional[RadarEntry]:
        return copy.deepcopy(self._radar.get(entry_id))

    def get_radar_entries(self, user_id: str) -> List[RadarEntry]:
        entries = [e for e in self._radar.values() if e.user_id == user_id]
        return copy.deepcopy(_newest_first(entries, "added_at"))

    def find_radar_entry(self, user_id: str, item_title: str, category: str) -> Optional[RadarEntry]:
        for entry in self._radar.values():
            if (entry.user_id == user_id and entry.item_title == item_title
                    and entry.category == category):
                return copy.deepcopy(entry)
        return None

    def update_radar_entry(self, entry: RadarEntry) -> RadarEntry:
        self._radar[entry.id] = copy.deepcopy(entry)
        return copy.deepcopy(entry)

    def delete_radar_entry(self, entry_id: str) -> None:
        self._radar.pop(entry_id, None)

    def get_radar_entries_since(self, cutoff: datetime) -> List[RadarEntry]:
        entries = [e for e in self._radar.values() if e.added_at >= cutoff]
        return copy.deepcopy(_newest_first(entries, "added_at"))

    # =========================================================================
    # Test helpers
    # =========================================================================

    def clear(self) -> None:
        """Clear all records (for testing)."""
        for table in (self._users, self._lists, self._follows, self._likes,
                      self._favorites, self._comments, self._radar):
            table.clear()

    def count(self) -> Dict[str, int]:
        """Number of stored records per table (for testing)."""
        return {
            "users": len(self._users),
            "lists": len(self._lists),
            "follows": len(self._follows),
            "likes": len(self._likes),
            "favorites": len(self._favorites),
            "comments": len(self._comments),
            "radar": len(self._radar),
        }
