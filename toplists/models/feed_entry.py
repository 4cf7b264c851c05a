"""Read-side view of a list as returned by every feed."""

from dataclasses import dataclass
from typing import Optional

from toplists.models.top_list import TopList
from toplists.models.user import User


@dataclass
class FeedEntry:
    """
    A list plus the data computed at read time.

    ``likes`` and ``comments`` are live counts of Like / Comment rows for
    the list; they are never persisted on the list itself.
    """
    top_list: TopList
    author: Optional[User]
    likes: int = 0
    comments: int = 0

    @property
    def list_id(self) -> str:
        return self.top_list.id

    def to_dict(self) -> dict:
        data = self.top_list.to_dict()
        if self.author is not None:
            data["author"] = {
                "userId": self.author.id,
                "name": self.author.username,
                "username": self.author.username,
                "avatar": self.author.avatar_url,
            }
        else:
            data["author"] = {"userId": self.top_list.owner_id}
        data["likes"] = self.likes
        data["comments"] = self.comments
        return data
