"""
Likes, favorites and comments on lists.

Likes and favorites are toggles: at most one row per (user, list), and
calling the toggle again removes it. Counts are always recounted after a
write.
"""

import logging
from typing import List, Optional

from toplists.errors import InvalidOperation, NotFound
from toplists.logging_util import mask_id
from toplists.models import Comment, Favorite, Like
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


class EngagementService:
    """Per-user reactions to lists."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def _require_list(self, list_id: str) -> None:
        if self.storage.get_list(list_id) is None:
            raise NotFound("List not found")

    def _likes_count(self, list_id: str) -> int:
        return self.storage.count_likes([list_id]).get(list_id, 0)

    # =========================================================================
    # Likes
    # =========================================================================

    def toggle_like(self, user_id: str, list_id: str) -> dict:
        """
        Like the list, or remove the existing like.

        Returns:
            ``{"liked": bool, "likesCount": int}`` after the change.

        Raises:
            NotFound: If the list does not exist.
        """
        self._require_list(list_id)

        if self.storage.find_like(user_id, list_id) is not None:
            self.storage.delete_like(user_id, list_id)
            liked = False
        else:
            self.storage.add_like(Like(user_id=user_id, list_id=list_id))
            liked = True

        logger.debug("User %s %s list %s", mask_id(user_id), "liked" if liked else "unliked", mask_id(list_id))
        return {"liked": liked, "likesCount": self._likes_count(list_id)}

    def like_status(self, list_id: str, viewer_id: Optional[str] = None) -> dict:
        """Like count plus whether the viewer liked it (False when anonymous)."""
        is_liked = False
        if viewer_id:
            is_liked = self.storage.find_like(viewer_id, list_id) is not None
        return {"likesCount": self._likes_count(list_id), "isLiked": is_liked}

    # =========================================================================
    # Favorites
    # =========================================================================

    def toggle_favorite(self, user_id: str, list_id: str) -> dict:
        """
        Raises:
            NotFound: If the list does not exist.
        """
        self._require_list(list_id)

        if self.storage.find_favorite(user_id, list_id) is not None:
            self.storage.delete_favorite(user_id, list_id)
            favorited = False
        else:
            self.storage.add_favorite(Favorite(user_id=user_id, list_id=list_id))
            favorited = True

        logger.debug("User %s favorite on %s: %s", mask_id(user_id), mask_id(list_id), favorited)
        return {"favorited": favorited}

    def is_favorited(self, list_id: str, viewer_id: Optional[str] = None) -> bool:
        if not viewer_id:
            return False
        return self.storage.find_favorite(viewer_id, list_id) is not None

    # =========================================================================
    # Comments
    # =========================================================================

    def list_comments(self, list_id: str) -> List[dict]:
        """Comments newest first, each with its author card."""
        comments = self.storage.get_comments(list_id)
        authors = {u.id: u for u in self.storage.get_users({c.user_id for c in comments})}
        return [c.to_dict(authors.get(c.user_id)) for c in comments]

    def add_comment(self, user_id: str, list_id: str, content) -> dict:
        """
        Raises:
            InvalidOperation: If the content is blank.
            NotFound: If the list does not exist.
        """
        if not isinstance(content, str) or not content.strip():
            raise InvalidOperation("Comment cannot be empty")
        self._require_list(list_id)

        comment = self.storage.add_comment(
            Comment(list_id=list_id, user_id=user_id, content=content.strip())
        )
        logger.info("Comment %s added to list %s", mask_id(comment.id), mask_id(list_id))
        return comment.to_dict(self.storage.get_user(user_id))

    def delete_comment(self, comment_id: str, user_id: str) -> None:
        """
        Raises:
            NotFound: If the comment is missing or written by someone else.
        """
        comment = self.storage.get_comment(comment_id)
        if comment is None or comment.user_id != user_id:
            raise NotFound("Comment not found or unauthorized")
        self.storage.delete_comment(comment_id)
        logger.info("Comment %s deleted", mask_id(comment_id))
