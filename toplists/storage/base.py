"""
Base storage abstraction for TopLists.

Defines the abstract interface that all storage backends must implement.
This allows swapping between the hosted Supabase backend and the
in-memory store used for tests and local development.

Contract shared by every backend:
- reads return model objects (never raw rows)
- a missing single record is ``None``, never an exception
- any failure of the underlying store raises StorageFailure
- no method caches results between calls
"""

from abc import ABC, abstractmethod
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


class Storage(ABC):
    """
    Abstract base class for all storage backends.

    Implementations must provide CRUD for users, lists (with their items),
    follow edges, likes, favorites, comments and radar entries.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Return the name of this storage backend.

        Used for logging and debugging.
        """
        pass

    # =========================================================================
    # Users
    # =========================================================================

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_users(self, user_ids: Iterable[str]) -> List[User]:
        """Users for the given ids; unknown ids are skipped."""
        pass

    @abstractmethod
    def find_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    def add_user(self, user: User) -> User:
        pass

    @abstractmethod
    def update_user(self, user: User) -> User:
        """Persist username, avatar and privacy flag of an existing user."""
        pass

    @abstractmethod
    def list_users(self, limit: int, exclude_ids: Iterable[str] = ()) -> List[User]:
        pass

    @abstractmethod
    def search_users(self, query: str, limit: int) -> List[User]:
        """Case-insensitive substring match on username."""
        pass

    # =========================================================================
    # Lists
    # =========================================================================

    @abstractmethod
    def get_list(self, list_id: str) -> Optional[TopList]:
        pass

    @abstractmethod
    def get_lists(
        self,
        owner_ids: Optional[Iterable[str]] = None,
        list_ids: Optional[Iterable[str]] = None,
    ) -> List[TopList]:
        """
        Lists with their items, newest first.

        Args:
            owner_ids: Only lists owned by these users (None = any owner).
            list_ids: Only these lists (None = any list).
        """
        pass

    @abstractmethod
    def add_list(self, top_list: TopList) -> TopList:
        pass

    @abstractmethod
    def replace_list(self, top_list: TopList) -> TopList:
        """Overwrite metadata and the full item sequence of an existing list."""
        pass

    @abstractmethod
    def delete_list(self, list_id: str) -> None:
        """Delete a list together with its items."""
        pass

    @abstractmethod
    def search_lists(self, query: str, limit: int) -> List[TopList]:
        """Case-insensitive substring match on title or description."""
        pass

    # =========================================================================
    # Follow edges
    # =========================================================================

    @abstractmethod
    def get_follow(self, follower_id: str, followed_id: str) -> Optional[FollowEdge]:
        pass

    @abstractmethod
    def get_follow_by_id(self, edge_id: str) -> Optional[FollowEdge]:
        pass

    @abstractmethod
    def get_follows(
        self,
        follower_id: Optional[str] = None,
        followed_id: Optional[str] = None,
        status: Optional[FollowStatus] = None,
    ) -> List[FollowEdge]:
        """Edges matching every given filter, newest first."""
        pass

    @abstractmethod
    def add_follow(self, edge: FollowEdge) -> FollowEdge:
        pass

    @abstractmethod
    def set_follow_status(self, edge_id: str, status: FollowStatus) -> None:
        pass

    @abstractmethod
    def delete_follow(self, edge_id: str) -> None:
        pass

    # =========================================================================
    # Likes
    # =========================================================================

    @abstractmethod
    def find_like(self, user_id: str, list_id: str) -> Optional[Like]:
        pass

    @abstractmethod
    def add_like(self, like: Like) -> Like:
        pass

    @abstractmethod
    def delete_like(self, user_id: str, list_id: str) -> None:
        pass

    @abstractmethod
    def count_likes(self, list_ids: Iterable[str]) -> Dict[str, int]:
        """Like count per list id (every requested id present, 0 if none)."""
        pass

    # =========================================================================
    # Favorites
    # =========================================================================

    @abstractmethod
    def find_favorite(self, user_id: str, list_id: str) -> Optional[Favorite]:
        pass

    @abstractmethod
    def add_favorite(self, favorite: Favorite) -> Favorite:
        pass

    @abstractmethod
    def delete_favorite(self, user_id: str, list_id: str) -> None:
        pass

    @abstractmethod
    def get_favorites(self, user_id: str) -> List[Favorite]:
        """A user's favorites, most recently favorited first."""
        pass

    # =========================================================================
    # Comments
    # =========================================================================

    @abstractmethod
    def get_comment(self, comment_id: str) -> Optional[Comment]:
        pass

    @abstractmethod
    def get_comments(self, list_id: str) -> List[Comment]:
        """Comments of a list, newest first."""
        pass

    @abstractmethod
    def add_comment(self, comment: Comment) -> Comment:
        pass

    @abstractmethod
    def delete_comment(self, comment_id: str) -> None:
        pass

    @abstractmethod
    def count_comments(self, list_ids: Iterable[str]) -> Dict[str, int]:
        pass

    # =========================================================================
    # Radar
    # =========================================================================

    @abstractmethod
    def add_radar_entry(self, entry: RadarEntry) -> RadarEntry:
        pass

    @abstractmethod
    def get_radar_entry(self, entry_id: str) -> Optional[RadarEntry]:
        pass

    @abstractmethod
    def get_radar_entries(self, user_id: str) -> List[RadarEntry]:
        """A user's radar, newest first."""
        pass

    @abstractmethod
    def find_radar_entry(self, user_id: str, item_title: str, category: str) -> Optional[RadarEntry]:
        pass

    @abstractmethod
    def update_radar_entry(self, entry: RadarEntry) -> RadarEntry:
        """Persist the notes of an existing entry."""
        pass

    @abstractmethod
    def delete_radar_entry(self, entry_id: str) -> None:
        pass

    @abstractmethod
    def get_radar_entries_since(self, cutoff: datetime) -> List[RadarEntry]:
        """Every user's entries added at or after ``cutoff``, newest first."""
        pass

    def __str__(self) -> str:
        return f"Storage({self.name})"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
