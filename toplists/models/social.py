"""
Social relationship models: follow edges, likes, favorites and comments.

These are plain membership facts. Counts derived from them (followers,
likes per list, comments per list) are always computed by counting rows,
never stored on the parent record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import uuid

from toplists.models.timestamps import utcnow, format_timestamp


class FollowStatus(str, Enum):
    """Lifecycle of a follow edge. Rejected or cancelled edges are deleted."""
    PENDING = "pending"
    ACCEPTED = "accepted"


@dataclass
class FollowEdge:
    """
    Directed follow relation follower -> followed.

    At most one edge exists per ordered pair and self-edges are not allowed.
    """

    follower_id: str
    followed_id: str
    status: FollowStatus = FollowStatus.PENDING
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.status = FollowStatus(self.status)
        if not self.follower_id or not self.followed_id:
            raise ValueError("FollowEdge validation failed: both user ids are required")
        if self.follower_id == self.followed_id:
            raise ValueError("FollowEdge validation failed: self-follow is not allowed")

    @property
    def is_accepted(self) -> bool:
        return self.status == FollowStatus.ACCEPTED

    @property
    def is_pending(self) -> bool:
        return self.status == FollowStatus.PENDING


@dataclass
class Like:
    user_id: str
    list_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Favorite:
    """A list saved for quick access. Favorites feed orders by ``created_at``."""
    user_id: str
    list_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Comment:
    list_id: str
    user_id: str
    content: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.content or not self.content.strip():
            raise ValueError("Comment validation failed: content cannot be empty")

    def to_dict(self, author=None) -> dict:
        """JSON payload; ``author`` is the resolved User, if any."""
        if author is not None:
            user = {"id": author.id, "username": author.username, "avatar": author.avatar_url}
        else:
            user = {
                "id": self.user_id,
                "username": "Usuario",
                "avatar": f"https://api.dicebear.com/7.x/avataaars/svg?seed={self.user_id}",
            }
        return {
            "id": self.id,
            "content": self.content,
            "createdAt": format_timestamp(self.created_at),
            "user": user,
        }
