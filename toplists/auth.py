"""
Bearer-token resolution.

Credentials are validated by the hosted identity provider; this module only
turns an ``Authorization`` header into "authenticated user id or None".
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import requests

from toplists.config import SUPABASE_URL, SUPABASE_ANON_KEY, REQUEST_TIMEOUT
from toplists.errors import StorageFailure, Unauthorized

logger = logging.getLogger(__name__)


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class IdentityProvider(ABC):
    """Maps a bearer token to a user id."""

    @abstractmethod
    def resolve(self, token: Optional[str]) -> Optional[str]:
        """
        Return the user id for ``token`` or None when it is missing,
        anonymous, expired or otherwise not accepted.
        """
        pass

    def require(self, token: Optional[str]) -> str:
        """
        Like resolve() but for operations that need a user.

        Raises:
            Unauthorized: If the token does not resolve to a user.
        """
        user_id = self.resolve(token)
        if not user_id:
            raise Unauthorized()
        return user_id


class SupabaseIdentityProvider(IdentityProvider):
    """Resolves tokens with the Supabase auth ``/auth/v1/user`` endpoint."""

    def __init__(self, url: str = None, anon_key: str = None, timeout: int = None):
        self.url = (url if url is not None else SUPABASE_URL).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else SUPABASE_ANON_KEY
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT

    def resolve(self, token: Optional[str]) -> Optional[str]:
        # The public anon key is sent by signed-out clients
        if not token or (self.anon_key and token == self.anon_key):
            return None

        try:
            response = requests.get(
                f"{self.url}/auth/v1/user",
                headers={
                    "apikey": self.anon_key,
                    "Authorization": f"Bearer {token}",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Identity provider request failed: %s", e)
            raise StorageFailure(f"Identity provider unavailable: {e}") from e

        if response.status_code in (401, 403):
            logger.debug("Token rejected by identity provider")
            return None
        if response.status_code != 200:
            logger.error("Identity provider returned HTTP %s", response.status_code)
            raise StorageFailure(f"Identity provider returned HTTP {response.status_code}")

        return response.json().get("id") or None


class MockIdentityProvider(IdentityProvider):
    """
    Token -> user id table for tests and local development.

    Unknown tokens resolve to None.
    """

    def __init__(self, tokens: Optional[Dict[str, str]] = None):
        self.tokens: Dict[str, str] = dict(tokens or {})

    def resolve(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        return self.tokens.get(token)
