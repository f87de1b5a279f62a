"""
Authentication provider interface.

Identity is delegated to an external provider; implementations only verify
tokens and map them to a User with a stable opaque id.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Verified caller identity."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class IAuthProvider(ABC):
    """Abstract interface for authentication providers."""

    @abstractmethod
    async def verify_token(self, token: str) -> User:
        """
        Verify a token issued by the identity provider.

        Args:
            token: Raw bearer token or session cookie value

        Returns:
            Verified user

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Whether requests must carry a token."""
        pass
