"""Abstract interfaces for infrastructure abstraction."""

from chatapp.interfaces.auth_provider import IAuthProvider, User
from chatapp.interfaces.chat_session_repository import IChatSessionRepository
from chatapp.interfaces.completion_provider import ICompletionProvider

__all__ = [
    "IAuthProvider",
    "IChatSessionRepository",
    "ICompletionProvider",
    "User",
]
