"""
User profiles, privacy settings, suggestions and search.
"""

import logging
from typing import List, Optional

from toplists.config import SEARCH_LIMIT, SUGGESTED_USERS_LIMIT
from toplists.errors import InvalidOperation, NotFound
from toplists.feeds.assembler import FeedAssembler
from toplists.logging_util import mask_id
from toplists.models import User
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


class ProfileService:
    """Reads and edits user records."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def _user(self, user_id: str) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def get_profile(self, user_id: str) -> dict:
        """Own profile, including email and privacy flag."""
        return self._user(user_id).to_profile_dict(include_private=True)

    def public_profile(self, user_id: str) -> dict:
        return self._user(user_id).to_profile_dict()

    def update_profile(self, user_id: str, payload: dict) -> dict:
        """
        Change username and/or avatar.

        Raises:
            InvalidOperation: Blank or already taken username.
            NotFound: Unknown user.
        """
        if not isinstance(payload, dict):
            raise InvalidOperation("Request body must be a JSON object")
        user = self._user(user_id)

        if "username" in payload:
            username = payload.get("username") or ""
            if not isinstance(username, str):
                raise InvalidOperation("username must be a string")
            username = username.strip()
            if not username:
                raise InvalidOperation("username cannot be empty")
            if username != user.username:
                taken = self.storage.find_user_by_username(username)
                if taken is not None and taken.id != user.id:
                    raise InvalidOperation("Username already taken")
            user.username = username

        if "avatar_url" in payload:
            avatar_url = payload.get("avatar_url") or ""
            if not isinstance(avatar_url, str):
                raise InvalidOperation("avatar_url must be a string")
            user.avatar_url = avatar_url

        updated = self.storage.update_user(user)
        logger.info("Profile of %s updated", mask_id(user_id))
        return updated.to_profile_dict(include_private=True)

    def update_settings(self, user_id: str, payload: dict) -> dict:
        """
        Set the privacy flag.

        Raises:
            InvalidOperation: If is_public is missing or not a boolean.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("is_public"), bool):
            raise InvalidOperation("is_public must be true or false")

        user = self._user(user_id)
        user.is_public = payload["is_public"]
        updated = self.storage.update_user(user)
        logger.info("User %s is now %s", mask_id(user_id), "public" if updated.is_public else "private")
        return {"is_public": updated.is_profile_public}

    def suggested_users(self, viewer_id: Optional[str] = None, limit: int = SUGGESTED_USERS_LIMIT) -> List[dict]:
        """
        Users to follow: everyone except the viewer and anyone the viewer
        already has an edge to (pending or accepted).
        """
        excluded = set()
        if viewer_id:
            excluded.add(viewer_id)
            excluded.update(e.followed_id for e in self.storage.get_follows(follower_id=viewer_id))
        users = self.storage.list_users(limit, exclude_ids=excluded)
        return [u.to_summary_dict() for u in users]

    def search(self, query: Optional[str], viewer_id: Optional[str] = None, limit: int = SEARCH_LIMIT) -> dict:
        """
        Users by username and lists by title/description.

        Lists are visibility-filtered for the viewer. A blank query returns
        empty results.
        """
        query = (query or "").strip()
        if not query:
            return {"users": [], "lists": []}

        users = self.storage.search_users(query, limit)
        lists = FeedAssembler(self.storage).search(query, viewer_id, limit)
        logger.debug("Search '%s': %d users, %d lists", query, len(users), len(lists))
        return {
            "users": [u.to_summary_dict() for u in users],
            "lists": [entry.to_dict() for entry in lists],
        }
