"""
Follow-state manager.

A follow is a directed edge follower -> followed with a pending/accepted
lifecycle:

    (none) --toggle--> pending --accept--> accepted
       ^                  |                    |
       +------toggle------+--------------------+
       +------reject------+

Toggling always removes an existing edge, whatever its status, so the same
action cancels a request or unfollows. Rejecting deletes the edge; a new
request can be sent right away.

Follower and following counts are always computed by counting edges.
"""

import logging
from typing import Dict, List, Optional

from toplists.errors import InvalidOperation, NotFound
from toplists.logging_util import mask_id
from toplists.models import FollowEdge, FollowStatus, User, format_timestamp
from toplists.storage.base import Storage

logger = logging.getLogger(__name__)


# Returned for anonymous callers and for pairs without an edge
NEUTRAL_STATUS = {"isFollowing": False, "isPending": False, "status": None}


class FollowManager:
    """Reads and mutates follow edges in a Storage backend."""

    def __init__(self, storage: Storage):
        self.storage = storage

    # =========================================================================
    # Mutations
    # =========================================================================

    def toggle_follow(self, requester_id: str, target_id: str) -> dict:
        """
        Request a follow, or remove the existing edge.

        Returns:
            ``{"following": False, "status": "pending"}`` when a request was
            created, ``{"following": False, "status": None}`` when an edge
            was removed.

        Raises:
            InvalidOperation: If a user tries to follow themselves.
        """
        if requester_id == target_id:
            raise InvalidOperation("You cannot follow yourself")

        existing = self.storage.get_follow(requester_id, target_id)
        if existing is not None:
            self.storage.delete_follow(existing.id)
            logger.info(
                "Removed %s follow edge %s -> %s",
                existing.status.value, mask_id(requester_id), mask_id(target_id),
            )
            return {"following": False, "status": None}

        self.storage.add_follow(FollowEdge(follower_id=requester_id, followed_id=target_id))
        logger.info("Follow requested %s -> %s", mask_id(requester_id), mask_id(target_id))
        return {"following": False, "status": FollowStatus.PENDING.value}

    def _pending_request_for(self, edge_id: str, user_id: str) -> FollowEdge:
        edge = self.storage.get_follow_by_id(edge_id)
        if edge is None or not edge.is_pending or edge.followed_id != user_id:
            raise NotFound("Follow request not found")
        return edge

    def accept_follow_request(self, edge_id: str, by_user_id: str) -> None:
        """
        Accept a pending request addressed to ``by_user_id``.

        Raises:
            NotFound: If the edge is missing, already accepted, or addressed
                to someone else.
        """
        edge = self._pending_request_for(edge_id, by_user_id)
        self.storage.set_follow_status(edge.id, FollowStatus.ACCEPTED)
        logger.info("Follow request %s accepted by %s", mask_id(edge.id), mask_id(by_user_id))

    def reject_follow_request(self, edge_id: str, by_user_id: str) -> None:
        """Same preconditions as accept_follow_request(), but deletes the edge."""
        edge = self._pending_request_for(edge_id, by_user_id)
        self.storage.delete_follow(edge.id)
        logger.info("Follow request %s rejected by %s", mask_id(edge.id), mask_id(by_user_id))

    # =========================================================================
    # Reads
    # =========================================================================

    def get_status(self, viewer_id: Optional[str], target_id: str) -> dict:
        """
        Follow status of viewer -> target.

        Anonymous viewers get the neutral default instead of an error.
        """
        if not viewer_id:
            return dict(NEUTRAL_STATUS)

        edge = self.storage.get_follow(viewer_id, target_id)
        if edge is None:
            return dict(NEUTRAL_STATUS)
        return {
            "isFollowing": edge.is_accepted,
            "isPending": edge.is_pending,
            "status": edge.status.value,
        }

    def _users_by_id(self, user_ids) -> Dict[str, User]:
        return {user.id: user for user in self.storage.get_users(user_ids)}

    def _format_requests(self, edges: List[FollowEdge], incoming: bool) -> List[dict]:
        other_ids = [e.follower_id if incoming else e.followed_id for e in edges]
        users = self._users_by_id(other_ids)

        requests_out = []
        for edge, other_id in zip(edges, other_ids):
            user = users.get(other_id)
            requests_out.append({
                "requestId": edge.id,
                "user": {
                    "id": other_id,
                    "username": user.username if user else "Unknown",
                    "avatar": user.avatar_url if user else "",
                },
                "createdAt": format_timestamp(edge.created_at),
            })
        return requests_out

    def pending_requests(self, user_id: str) -> List[dict]:
        """Requests waiting for ``user_id`` to answer, newest first."""
        edges = self.storage.get_follows(followed_id=user_id, status=FollowStatus.PENDING)
        return self._format_requests(edges, incoming=True)

    def outgoing_requests(self, user_id: str) -> List[dict]:
        """Requests ``user_id`` sent that are still pending, newest first."""
        edges = self.storage.get_follows(follower_id=user_id, status=FollowStatus.PENDING)
        return self._format_requests(edges, incoming=False)

    def pending_count(self, user_id: str) -> int:
        return len(self.storage.get_follows(followed_id=user_id, status=FollowStatus.PENDING))

    def followers(self, user_id: str) -> List[dict]:
        edges = self.storage.get_follows(followed_id=user_id, status=FollowStatus.ACCEPTED)
        users = self.storage.get_users(e.follower_id for e in edges)
        return [user.to_summary_dict() for user in users]

    def following(self, user_id: str) -> List[dict]:
        edges = self.storage.get_follows(follower_id=user_id, status=FollowStatus.ACCEPTED)
        users = self.storage.get_users(e.followed_id for e in edges)
        return [user.to_summary_dict() for user in users]

    def stats(self, user_id: str) -> dict:
        """Accepted followers, accepted following and number of lists."""
        return {
            "followers": len(self.storage.get_follows(followed_id=user_id, status=FollowStatus.ACCEPTED)),
            "following": len(self.storage.get_follows(follower_id=user_id, status=FollowStatus.ACCEPTED)),
            "lists": len(self.storage.get_lists(owner_ids=[user_id])),
        }
