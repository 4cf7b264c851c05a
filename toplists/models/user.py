"""
User model for TopLists.

A user profile as stored in the ``users`` table. Authentication itself is
handled by the identity provider; this record only carries what the
social features need (username, avatar and the privacy flag).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
import uuid

from toplists.models.timestamps import utcnow, format_timestamp


DEFAULT_AVATAR_URL = "https://images.unsplash.com/photo-1614283233556-f35b0c801ef1?w=100"


@dataclass
class User:
    """
    A registered user.

    Attributes:
        username: Unique handle shown everywhere in the UI.
        id: Identity provider user id (UUID string).
        email: Contact email (never exposed in public payloads).
        avatar_url: Profile image URL.
        is_public: Privacy flag. None means "never set" and counts as public.
        created_at: Signup time.
    """

    username: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    email: str = ""
    avatar_url: str = DEFAULT_AVATAR_URL
    is_public: Optional[bool] = True
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ValueError: If username or id is empty.
        """
        errors = []
        if not self.username or not self.username.strip():
            errors.append("username is required and cannot be empty")
        if not self.id:
            errors.append("id is required and cannot be empty")
        if errors:
            raise ValueError(f"User validation failed: {'; '.join(errors)}")

    @property
    def is_profile_public(self) -> bool:
        """Public unless explicitly set to False."""
        return self.is_public is not False

    def to_summary_dict(self) -> dict:
        """Compact author/user card used inside other payloads."""
        return {
            "id": self.id,
            "username": self.username,
            "name": self.username,
            "avatar": self.avatar_url,
        }

    def to_profile_dict(self, include_private: bool = False) -> dict:
        """Profile payload; email and privacy flag only for the owner."""
        data = self.to_summary_dict()
        if include_private:
            data["email"] = self.email
            data["is_public"] = self.is_profile_public
        return data

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "avatar_url": self.avatar_url,
            "is_public": self.is_public,
            "created_at": format_timestamp(self.created_at),
        }

    def __str__(self) -> str:
        return f"@{self.username}"
