"""
Supabase storage backend for TopLists.

Implements the Storage interface on top of the PostgREST API that Supabase
exposes for the project database. Every call is a plain HTTP request made
with ``requests`` using the service role key.

PostgREST Documentation: https://postgrest.org/en/stable/references/api.html

=============================================================================
DATABASE SCHEMA
=============================================================================

| Table         | Columns                                                        |
|---------------|----------------------------------------------------------------|
| users         | id, username, email, avatar_url, is_public, created_at         |
| categories    | id, category_name                                              |
| subcategories | id, category_id, subcategory_name                              |
| lists         | id, user_id, category_id, subcategory_id, title, description,  |
|               | created_at                                                     |
| items         | id, list_id, name, description, image_url, rating, ratings     |
|               | (jsonb), item_order                                            |
| followers     | id, follower_id, followed_id, status, created_at               |
| likes         | id, user_id, list_id, created_at                               |
| favorites     | id, user_id, list_id, created_at                               |
| comments      | id, list_id, user_id, content, created_at                      |
| radar         | id, user_id, item_title, item_description, item_image,         |
|               | category, list_id, list_title, notes, added_at                 |

Failures are never hidden: any transport error or non-2xx response is
raised as StorageFailure with the original exception chained.
=============================================================================
"""

import logging
import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import requests

from toplists.config import (
    SUPABASE_URL,
    SUPABASE_SERVICE_ROLE_KEY,
    REQUEST_TIMEOUT,
)
from toplists.criteria import DEFAULT_CATEGORY
from toplists.errors import StorageFailure
from toplists.models import (
    DEFAULT_AVATAR_URL,
    Comment,
    Favorite,
    FollowEdge,
    FollowStatus,
    Like,
    ListItem,
    RadarEntry,
    TopList,
    User,
    format_timestamp,
    parse_timestamp,
    utcnow,
)
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)

# Lists are always read with their items and category names embedded
LIST_SELECT = (
    "*,"
    "items(*),"
    "categories!lists_category_id_fkey(id,category_name),"
    "subcategories!lists_subcategory_id_fkey(id,subcategory_name)"
)

# Characters that would break PostgREST filter syntax inside a search term
_UNSAFE_SEARCH_CHARS = re.compile(r"[,()*\\\"']")


def _eq(value: Any) -> str:
    return f"eq.{value}"


def _in(values: Iterable[str]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


def _timestamp(value: Optional[str]) -> datetime:
    return parse_timestamp(value) or utcnow()


class SupabaseStorage(Storage):
    """
    Supabase-backed storage implementation.

    Configuration is pulled from environment variables via toplists.config:
    - SUPABASE_URL: project URL
    - SUPABASE_SERVICE_ROLE_KEY: key with full table access
    """

    def __init__(
        self,
        url: str = None,
        service_key: str = None,
        timeout: int = None,
    ):
        """
        Initialize SupabaseStorage.

        Args:
            url: Project URL. Defaults to config.SUPABASE_URL.
            service_key: Service role key. Defaults to config.SUPABASE_SERVICE_ROLE_KEY.
            timeout: Per-request timeout in seconds. Defaults to config.REQUEST_TIMEOUT.
        """
        # Use provided values, or fall back to config if None (not empty string)
        self.url = (url if url is not None else SUPABASE_URL).rstrip("/")
        self.service_key = service_key if service_key is not None else SUPABASE_SERVICE_ROLE_KEY
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT

    @property
    def name(self) -> str:
        return "supabase"

    @property
    def _headers(self) -> Dict[str, str]:
        """Construct headers for API requests."""
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
        }

    def _validate_config(self) -> None:
        """Validate that required configuration is present."""
        if not self.url:
            raise ValueError("SUPABASE_URL is not configured")
        if not self.service_key:
            raise ValueError("SUPABASE_SERVICE_ROLE_KEY is not configured")

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Any = None,
        returning: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Perform one PostgREST call and return the decoded rows.

        Raises:
            StorageFailure: On any transport error or non-2xx status.
        """
        self._validate_config()

        headers = self._headers
        if returning:
            headers["Prefer"] = "return=representation"

        try:
            response = requests.request(
                method,
                f"{self.url}/rest/v1/{table}",
                headers=headers,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, table, e)
            raise StorageFailure(f"{method} {table} failed: {e}") from e

        if not response.content:
            return []
        data = response.json()
        if isinstance(data, dict):
            return [data]
        return data

    def _select(self, table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        params = {"select": "*", **params}
        return self._request("GET", table, params=params)

    def _insert(self, table: str, rows: Any) -> List[Dict[str, Any]]:
        return self._request("POST", table, payload=rows, returning=True)

    def _update(self, table: str, filters: Dict[str, Any], values: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self._request("PATCH", table, params=filters, payload=values, returning=True)

    def _delete(self, table: str, filters: Dict[str, Any]) -> None:
        self._request("DELETE", table, params=filters)

    def _first(self, table: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self._select(table, {**params, "limit": 1})
        return rows[0] if rows else None

    # =========================================================================
    # Serialization: models <-> rows
    # =========================================================================

    @staticmethod
    def user_from_row(row: Dict[str, Any]) -> User:
        return User(
            id=row["id"],
            username=row["username"],
            email=row.get("email") or "",
            avatar_url=row.get("avatar_url") or DEFAULT_AVATAR_URL,
            is_public=row.get("is_public"),
            created_at=_timestamp(row.get("created_at")),
        )

    @staticmethod
    def user_to_row(user: User) -> Dict[str, Any]:
        return {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "avatar_url": user.avatar_url,
            "is_public": user.is_public,
        }

    @staticmethod
    def list_from_row(row: Dict[str, Any]) -> TopList:
        """
        Convert a list row (with embedded items and category names) to a TopList.

        Items are ordered by ``item_order`` and re-ranked densely from 1.
        """
        category = (row.get("categories") or {}).get("category_name") or DEFAULT_CATEGORY
        subcategory = (row.get("subcategories") or {}).get("subcategory_name")

        raw_items = sorted(row.get("items") or [], key=lambda i: i.get("item_order") or 0)
        items = [
            ListItem(
                id=item.get("id") or "",
                name=item.get("name") or "",
                rank=index,
                rating=float(item.get("rating") or 0),
                ratings=item.get("ratings") or {},
                description=item.get("description") or "",
                image_url=item.get("image_url") or "",
            )
            for index, item in enumerate(raw_items, start=1)
        ]

        return TopList(
            id=row["id"],
            owner_id=row["user_id"],
            title=row["title"],
            category=category,
            subcategory=subcategory,
            description=row.get("description") or "",
            items=items,
            created_at=_timestamp(row.get("created_at")),
        )

    @staticmethod
    def item_to_row(item: ListItem, list_id: str) -> Dict[str, Any]:
        return {
            "list_id": list_id,
            "name": item.name,
            "description": item.description or "",
            "image_url": item.image_url or "",
            "rating": item.rating or 0,
            "ratings": item.ratings or None,
            "item_order": item.rank,
        }

    @staticmethod
    def follow_from_row(row: Dict[str, Any]) -> FollowEdge:
        return FollowEdge(
            id=row["id"],
            follower_id=row["follower_id"],
            followed_id=row["followed_id"],
            status=FollowStatus(row.get("status") or FollowStatus.PENDING.value),
            created_at=_timestamp(row.get("created_at")),
        )

    @staticmethod
    def like_from_row(row: Dict[str, Any]) -> Like:
        return Like(
            id=row["id"],
            user_id=row["user_id"],
            list_id=row["list_id"],
            created_at=_timestamp(row.get("created_at")),
        )

    @staticmethod
    def favorite_from_row(row: Dict[str, Any]) -> Favorite:
        return Favorite(
            id=row["id"],
            user_id=row["user_id"],
            list_id=row["list_id"],
            created_at=_timestamp(row.get("created_at")),
        )

    @staticmethod
    def comment_from_row(row: Dict[str, Any]) -> Comment:
        return Comment(
            id=row["id"],
            list_id=row["list_id"],
            user_id=row["user_id"],
            content=row["content"],
            created_at=_timestamp(row.get("created_at")),
        )

    @staticmethod
    def radar_from_row(row: Dict[str, Any]) -> RadarEntry:
        return RadarEntry(
            id=row["id"],
            user_id=row["user_id"],
            item_title=row["item_title"],
            category=row["category"],
            item_description=row.get("item_description") or "",
            item_image=row.get("item_image") or "",
            list_id=row.get("list_id") or "",
            list_title=row.get("list_title") or "",
            notes=row.get("notes") or "",
            added_at=_timestamp(row.get("added_at")),
        )

    @staticmethod
    def radar_to_row(entry: RadarEntry) -> Dict[str, Any]:
        return {
            "user_id": entry.user_id,
            "item_title": entry.item_title,
            "item_description": entry.item_description,
            "item_image": entry.item_image,
            "category": entry.category,
            "list_id": entry.list_id,
            "list_title": entry.list_title,
            "notes": entry.notes,
        }

    # =========================================================================
    # Users
    # =========================================================================

    def get_user(self, user_id: str) -> Optional[User]:
        row = self._first("users", {"id": _eq(user_id)})
        return self.user_from_row(row) if row else None

    def get_users(self, user_ids: Iterable[str]) -> List[User]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        rows = self._select("users", {"id": _in(ids)})
        return [self.user_from_row(r) for r in rows]

    def find_user_by_username(self, username: str) -> Optional[User]:
        row = self._first("users", {"username": _eq(username)})
        return self.user_from_row(row) if row else None

    def add_user(self, user: User) -> User:
        rows = self._insert("users", self.user_to_row(user))
        return self.user_from_row(rows[0])

    def update_user(self, user: User) -> User:
        values = self.user_to_row(user)
        values.pop("id")
        rows = self._update("users", {"id": _eq(user.id)}, values)
        return self.user_from_row(rows[0]) if rows else user

    def list_users(self, limit: int, exclude_ids: Iterable[str] = ()) -> List[User]:
        params: Dict[str, Any] = {"limit": limit}
        excluded = list(exclude_ids)
        if excluded:
            params["id"] = f"not.{_in(excluded)}"
        return [self.user_from_row(r) for r in self._select("users", params)]

    def search_users(self, query: str, limit: int) -> List[User]:
        term = _UNSAFE_SEARCH_CHARS.sub("", query).strip()
        if not term:
            return []
        rows = self._select("users", {"username": f"ilike.*{term}*", "limit": limit})
        return [self.user_from_row(r) for r in rows]

    # =========================================================================
    # Lists
    # =========================================================================

    def _category_ids(self, category: str, subcategory: Optional[str]) -> tuple:
        """Resolve category/subcategory names to ids (None when unknown)."""
        category_id = None
        subcategory_id = None

        row = self._first("categories", {"category_name": _eq(category)})
        if row:
            category_id = row["id"]
            if subcategory:
                sub = self._first(
                    "subcategories",
                    {"subcategory_name": _eq(subcategory), "category_id": _eq(category_id)},
                )
                if sub:
                    subcategory_id = sub["id"]

        return category_id, subcategory_id

    def _list_row(self, top_list: TopList) -> Dict[str, Any]:
        category_id, subcategory_id = self._category_ids(top_list.category, top_list.subcategory)
        return {
            "user_id": top_list.owner_id,
            "category_id": category_id,
            "subcategory_id": subcategory_id,
            "title": top_list.title,
            "description": top_list.description or "",
        }

    def get_list(self, list_id: str) -> Optional[TopList]:
        rows = self._select("lists", {"select": LIST_SELECT, "id": _eq(list_id), "limit": 1})
        return self.list_from_row(rows[0]) if rows else None

    def get_lists(
        self,
        owner_ids: Optional[Iterable[str]] = None,
        list_ids: Optional[Iterable[str]] = None,
    ) -> List[TopList]:
        params: Dict[str, Any] = {"select": LIST_SELECT, "order": "created_at.desc"}
        if owner_ids is not None:
            owners = list(owner_ids)
            if not owners:
                return []
            params["user_id"] = _in(owners)
        if list_ids is not None:
            ids = list(list_ids)
            if not ids:
                return []
            params["id"] = _in(ids)
        return [self.list_from_row(r) for r in self._select("lists", params)]

    def add_list(self, top_list: TopList) -> TopList:
        rows = self._insert("lists", self._list_row(top_list))
        new_id = rows[0]["id"]

        if top_list.items:
            try:
                self._insert("items", [self.item_to_row(item, new_id) for item in top_list.items])
            except StorageFailure:
                # Don't leave an empty list behind
                self._delete("lists", {"id": _eq(new_id)})
                raise

        created = self.get_list(new_id)
        if created is None:
            raise StorageFailure(f"List {new_id} vanished after insert")
        return created

    def replace_list(self, top_list: TopList) -> TopList:
        self._update("lists", {"id": _eq(top_list.id)}, self._list_row(top_list))
        self._delete("items", {"list_id": _eq(top_list.id)})
        if top_list.items:
            self._insert("items", [self.item_to_row(item, top_list.id) for item in top_list.items])
        return self.get_list(top_list.id) or top_list

    def delete_list(self, list_id: str) -> None:
        self._delete("items", {"list_id": _eq(list_id)})
        self._delete("lists", {"id": _eq(list_id)})

    def search_lists(self, query: str, limit: int) -> List[TopList]:
        term = _UNSAFE_SEARCH_CHARS.sub("", query).strip()
        if not term:
            return []
        params = {
            "select": LIST_SELECT,
            "or": f"(title.ilike.*{term}*,description.ilike.*{term}*)",
            "order": "created_at.desc",
            "limit": limit,
        }
        return [self.list_from_row(r) for r in self._select("lists", params)]

    # =========================================================================
    # Follow edges
    # =========================================================================

    def get_follow(self, follower_id: str, followed_id: str) -> Optional[FollowEdge]:
        row = self._first(
            "followers",
            {"follower_id": _eq(follower_id), "followed_id": _eq(followed_id)},
        )
        return self.follow_from_row(row) if row else None

    def get_follow_by_id(self, edge_id: str) -> Optional[FollowEdge]:
        row = self._first("followers", {"id": _eq(edge_id)})
        return self.follow_from_row(row) if row else None

    def get_follows(
        self,
        follower_id: Optional[str] = None,
        followed_id: Optional[str] = None,
        status: Optional[FollowStatus] = None,
    ) -> List[FollowEdge]:
        params: Dict[str, Any] = {"order": "created_at.desc"}
        if follower_id is not None:
            params["follower_id"] = _eq(follower_id)
        if followed_id is not None:
            params["followed_id"] = _eq(followed_id)
        if status is not None:
            params["status"] = _eq(FollowStatus(status).value)
        return [self.follow_from_row(r) for r in self._select("followers", params)]

    def add_follow(self, edge: FollowEdge) -> FollowEdge:
        rows = self._insert("followers", {
            "follower_id": edge.follower_id,
            "followed_id": edge.followed_id,
            "status": edge.status.value,
        })
        return self.follow_from_row(rows[0])

    def set_follow_status(self, edge_id: str, status: FollowStatus) -> None:
        self._update("followers", {"id": _eq(edge_id)}, {"status": FollowStatus(status).value})

    def delete_follow(self, edge_id: str) -> None:
        self._delete("followers", {"id": _eq(edge_id)})

    # =========================================================================
    # Likes
    # =========================================================================

    def find_like(self, user_id: str, list_id: str) -> Optional[Like]:
        row = self._first("likes", {"user_id": _eq(user_id), "list_id": _eq(list_id)})
        return self.like_from_row(row) if row else None

    def add_like(self, like: Like) -> Like:
        rows = self._insert("likes", {"user_id": like.user_id, "list_id": like.list_id})
        return self.like_from_row(rows[0])

    def delete_like(self, user_id: str, list_id: str) -> None:
        self._delete("likes", {"user_id": _eq(user_id), "list_id": _eq(list_id)})

    def _count_by_list(self, table: str, list_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(dict.fromkeys(list_ids))
        counts = {list_id: 0 for list_id in ids}
        if not ids:
            return counts
        rows = self._select(table, {"select": "list_id", "list_id": _in(ids)})
        counts.update(Counter(r["list_id"] for r in rows))
        return counts

    def count_likes(self, list_ids: Iterable[str]) -> Dict[str, int]:
        return self._count_by_list("likes", list_ids)

    # =========================================================================
    # Favorites
    # =========================================================================

    def find_favorite(self, user_id: str, list_id: str) -> Optional[Favorite]:
        row = self._first("favorites", {"user_id": _eq(user_id), "list_id": _eq(list_id)})
        return self.favorite_from_row(row) if row else None

    def add_favorite(self, favorite: Favorite) -> Favorite:
        rows = self._insert("favorites", {"user_id": favorite.user_id, "list_id": favorite.list_id})
        return self.favorite_from_row(rows[0])

    def delete_favorite(self, user_id: str, list_id: str) -> None:
        self._delete("favorites", {"user_id": _eq(user_id), "list_id": _eq(list_id)})

    def get_favorites(self, user_id: str) -> List[Favorite]:
        rows = self._select("favorites", {"user_id": _eq(user_id), "order": "created_at.desc"})
        return [self.favorite_from_row(r) for r in rows]

    # =========================================================================
    # Comments
    # =========================================================================

    def get_comment(self, comment_id: str) -> Optional[Comment]:
        row = self._first("comments", {"id": _eq(comment_id)})
        return self.comment_from_row(row) if row else None

    def get_comments(self, list_id: str) -> List[Comment]:
        rows = self._select("comments", {"list_id": _eq(list_id), "order": "created_at.desc"})
        return [self.comment_from_row(r) for r in rows]

    def add_comment(self, comment: Comment) -> Comment:
        rows = self._insert("comments", {
            "list_id": comment.list_id,
            "user_id": comment.user_id,
            "content": comment.content,
        })
        return self.comment_from_row(rows[0])

    def delete_comment(self, comment_id: str) -> None:
        self._delete("comments", {"id": _eq(comment_id)})

    def count_comments(self, list_ids: Iterable[str]) -> Dict[str, int]:
        return self._count_by_list("comments", list_ids)

    # =========================================================================
    # Radar
    # =========================================================================

    def add_radar_entry(self, entry: RadarEntry) -> RadarEntry:
        rows = self._insert("radar", self.radar_to_row(entry))
        return self.radar_from_row(rows[0])

    def get_radar_entry(self, entry_id: str) -> Optional[RadarEntry]:
        row = self._first("radar", {"id": _eq(entry_id)})
        return self.radar_from_row(row) if row else None

    def get_radar_entries(self, user_id: str) -> List[RadarEntry]:
        rows = self._select("radar", {"user_id": _eq(user_id), "order": "added_at.desc"})
        return [self.radar_from_row(r) for r in rows]

    def find_radar_entry(self, user_id: str, item_title: str, category: str) -> Optional[RadarEntry]:
        row = self._first("radar", {
            "user_id": _eq(user_id),
            "item_title": _eq(item_title),
            "category": _eq(category),
        })
        return self.radar_from_row(row) if row else None

    def update_radar_entry(self, entry: RadarEntry) -> RadarEntry:
        rows = self._update("radar", {"id": _eq(entry.id)}, {"notes": entry.notes or ""})
        return self.radar_from_row(rows[0]) if rows else entry

    def delete_radar_entry(self, entry_id: str) -> None:
        self._delete("radar", {"id": _eq(entry_id)})

    def get_radar_entries_since(self, cutoff: datetime) -> List[RadarEntry]:
        rows = self._select("radar", {
            "added_at": f"gte.{format_timestamp(cutoff)}",
            "order": "added_at.desc",
        })
        return [self.radar_from_row(r) for r in rows]
