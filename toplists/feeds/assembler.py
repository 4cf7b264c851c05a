"""
Feed assembler.

Builds the ordered list views (all lists, my lists, following feed,
favorites, trending, per-user top lists) from storage. Every entry gets
its like and comment counts computed at read time.

Nothing is kept between calls: each view fetches what it needs, applies
visibility, sorts and returns.
"""

import logging
from typing import Dict, List, Optional

from toplists.config import TRENDING_DEFAULT_LIMIT, USER_TOP_LISTS_LIMIT
from toplists.errors import InvalidOperation, NotFound
from toplists.logging_util import mask_id
from toplists.models import FeedEntry, TopList, User
from toplists.social.visibility import VisibilityFilter
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


def _by_likes(entries: List[FeedEntry]) -> List[FeedEntry]:
    """Like count desc, ties broken by creation time desc."""
    return sorted(entries, key=lambda e: (e.likes, e.top_list.created_at), reverse=True)


class FeedAssembler:
    """Read-side views over lists."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self.visibility = VisibilityFilter(storage)

    def _entries(
        self,
        lists: List[TopList],
        owners: Optional[Dict[str, User]] = None,
    ) -> List[FeedEntry]:
        """Wrap lists with author and live like/comment counts, keeping order."""
        if not lists:
            return []
        if owners is None:
            owners = self.visibility.owners_for(lists)

        list_ids = [tl.id for tl in lists]
        likes = self.storage.count_likes(list_ids)
        comments = self.storage.count_comments(list_ids)

        return [
            FeedEntry(
                top_list=tl,
                author=owners.get(tl.owner_id),
                likes=likes.get(tl.id, 0),
                comments=comments.get(tl.id, 0),
            )
            for tl in lists
        ]

    # =========================================================================
    # Feeds
    # =========================================================================

    def list_all(self, viewer_id: Optional[str] = None) -> List[FeedEntry]:
        """Every list the viewer may see, newest first."""
        lists = self.storage.get_lists()
        owners = self.visibility.owners_for(lists)
        visible = self.visibility.filter(lists, viewer_id, owners=owners)
        return self._entries(visible, owners)

    def list_owned(self, owner_id: str) -> List[FeedEntry]:
        """The owner's own lists, private or not, newest first."""
        return self._entries(self.storage.get_lists(owner_ids=[owner_id]))

    def list_from_followed(self, viewer_id: str) -> List[FeedEntry]:
        """
        Lists of users the viewer follows with an accepted edge, newest first.

        Empty when the viewer follows nobody.
        """
        followed = self.visibility.followed_ids(viewer_id)
        if not followed:
            logger.debug("User %s follows nobody, empty feed", mask_id(viewer_id))
            return []
        return self._entries(self.storage.get_lists(owner_ids=followed))

    def list_favorites(self, viewer_id: str) -> List[FeedEntry]:
        """Favorited lists, most recently favorited first."""
        favorites = self.storage.get_favorites(viewer_id)
        if not favorites:
            return []

        by_id = {tl.id: tl for tl in self.storage.get_lists(list_ids=[f.list_id for f in favorites])}
        # Favorites of deleted lists are skipped
        ordered = [by_id[f.list_id] for f in favorites if f.list_id in by_id]
        return self._entries(ordered)

    def list_trending(self, limit: int = TRENDING_DEFAULT_LIMIT) -> List[FeedEntry]:
        """
        Most liked lists of public users.

        Lists of private owners never appear, whoever is asking.

        Raises:
            InvalidOperation: If limit is below 1.
        """
        if limit < 1:
            raise InvalidOperation("limit must be at least 1")

        lists = self.storage.get_lists()
        owners = self.visibility.owners_for(lists)
        public = [
            tl for tl in lists
            if tl.owner_id in owners and owners[tl.owner_id].is_profile_public
        ]
        return _by_likes(self._entries(public, owners))[:limit]

    # =========================================================================
    # Single list and profile views
    # =========================================================================

    def list_detail(self, list_id: str, viewer_id: Optional[str] = None) -> FeedEntry:
        """
        One list with counts.

        Raises:
            NotFound: If the list is missing or the viewer may not see it.
        """
        top_list = self.storage.get_list(list_id)
        if top_list is None or not self.visibility.is_visible(top_list, viewer_id):
            raise NotFound("List not found")
        return self._entries([top_list])[0]

    def user_top_lists(
        self,
        user_id: str,
        viewer_id: Optional[str] = None,
        limit: int = USER_TOP_LISTS_LIMIT,
    ) -> List[FeedEntry]:
        """A user's most liked lists, empty if the viewer may not see them."""
        lists = self.storage.get_lists(owner_ids=[user_id])
        visible = self.visibility.filter(lists, viewer_id)
        return _by_likes(self._entries(visible))[:max(limit, 0)]

    def search(self, query: str, viewer_id: Optional[str], limit: int) -> List[FeedEntry]:
        """Lists whose title or description contains ``query``, visibility-filtered."""
        # Over-fetch so hidden lists do not shrink the page too much
        lists = self.storage.search_lists(query, limit * 2)
        return self._entries(self.visibility.filter(lists, viewer_id)[:limit])
