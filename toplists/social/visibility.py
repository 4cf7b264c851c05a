"""
Privacy-aware visibility of lists.

Rules, first match wins:

1. Owner profile is public (or the flag was never set) -> visible to anyone.
2. Viewer is the owner -> visible.
3. Viewer follows the owner with an accepted edge -> visible.
4. Otherwise hidden.

Anonymous viewers can only pass rule 1. Follow edges are loaded again for
every call because they can change between requests.
"""

import logging
from typing import Dict, Iterable, List, Optional

from toplists.models import FollowStatus, TopList, User
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


def is_list_visible(
    top_list: TopList,
    owner: Optional[User],
    viewer_id: Optional[str],
    followed_ids: Iterable[str] = (),
) -> bool:
    """
    Decide whether ``viewer_id`` may see ``top_list``.

    Args:
        top_list: Candidate list.
        owner: Owner's user record. None (unknown owner) counts as public.
        viewer_id: Viewer id, or None for anonymous viewers.
        followed_ids: Ids the viewer follows with an accepted edge.
    """
    if owner is None or owner.is_profile_public:
        return True
    if not viewer_id:
        return False
    if viewer_id == top_list.owner_id:
        return True
    return top_list.owner_id in set(followed_ids)


class VisibilityFilter:
    """Applies is_list_visible() with owners and follows loaded from storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def owners_for(self, lists: Iterable[TopList]) -> Dict[str, User]:
        owner_ids = {tl.owner_id for tl in lists}
        return {user.id: user for user in self.storage.get_users(owner_ids)}

    def followed_ids(self, viewer_id: Optional[str]) -> set:
        if not viewer_id:
            return set()
        edges = self.storage.get_follows(follower_id=viewer_id, status=FollowStatus.ACCEPTED)
        return {edge.followed_id for edge in edges}

    def is_visible(self, top_list: TopList, viewer_id: Optional[str]) -> bool:
        owner = self.storage.get_user(top_list.owner_id)
        return is_list_visible(top_list, owner, viewer_id, self.followed_ids(viewer_id))

    def filter(
        self,
        lists: List[TopList],
        viewer_id: Optional[str],
        owners: Optional[Dict[str, User]] = None,
    ) -> List[TopList]:
        """Keep only the lists the viewer may see, preserving order."""
        if owners is None:
            owners = self.owners_for(lists)
        followed = self.followed_ids(viewer_id)

        visible = [
            tl for tl in lists
            if is_list_visible(tl, owners.get(tl.owner_id), viewer_id, followed)
        ]
        logger.debug("Visibility: %d of %d lists visible", len(visible), len(lists))
        return visible
