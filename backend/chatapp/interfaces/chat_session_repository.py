"""
Chat session repository interface.

Defines the contract for chat session and message persistence.
Implementations wrap store errors in DependencyFailureError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from chatapp.models.chat_session import ChatMessage, ChatSession
from chatapp.models.enums import MessageRole, MessageType


class IChatSessionRepository(ABC):
    """Abstract interface for chat session persistence."""

    @abstractmethod
    async def create_session(self, owner_id: str, title: Optional[str] = None) -> ChatSession:
        """
        Create a chat session.

        Args:
            owner_id: Owner user ID
            title: Optional session title ("New Chat" when absent)

        Returns:
            Created ChatSession with generated id
        """
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[ChatSession]:
        """
        Get a session by id regardless of owner.

        Used by the ownership guard, which needs to tell a missing row
        from a foreign one.
        """
        pass

    @abstractmethod
    async def list_sessions(
        self,
        owner_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ChatSession]:
        """
        List chat sessions for a user, newest first.

        Args:
            owner_id: Owner user ID
            limit: Max sessions (all when None)
            offset: Pagination offset

        Returns:
            List of chat sessions
        """
        pass

    @abstractmethod
    async def rename_session(
        self,
        owner_id: str,
        session_id: str,
        title: str,
    ) -> Optional[ChatSession]:
        """
        Update a session title where id and owner both match.

        Returns:
            Updated session, or None if no row matched
        """
        pass

    @abstractmethod
    async def delete_session(self, owner_id: str, session_id: str) -> bool:
        """
        Delete a session and all of its messages in one transaction.

        Returns:
            True if the session row was deleted
        """
        pass

    @abstractmethod
    async def add_message(
        self,
        owner_id: str,
        session_id: str,
        role: MessageRole,
        message_type: MessageType,
        content: str,
    ) -> ChatMessage:
        """
        Append a message to a session.

        created_at is strictly greater than any earlier message in the
        same session.
        """
        pass

    @abstractmethod
    async def list_messages(
        self,
        session_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ChatMessage]:
        """
        List messages for a session, oldest first.

        Not filtered by owner; the caller checks ownership of every row.
        """
        pass
