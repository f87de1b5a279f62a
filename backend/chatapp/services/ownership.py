from __future__ import annotations

from typing import Iterable

from chatapp.core.exceptions import ForbiddenError, NotFoundError
from chatapp.core.logger import logger
from chatapp.interfaces.chat_session_repository import IChatSessionRepository
from chatapp.models.chat_session import ChatMessage, ChatSession


async def require_owner(
    repo: IChatSessionRepository,
    session_id: str,
    caller_id: str,
) -> ChatSession:
    """Fresh read of the session; returns it only when the caller owns it."""
    session = await repo.get_session(session_id)
    if not session:
        raise NotFoundError(f"Chat session {session_id} not found")

    if session.owner_id != caller_id:
        logger.warning(f"User {caller_id} denied access to chat session {session_id}")
        raise ForbiddenError("You are not authorized to access this chat session.")

    return session


def ensure_messages_owned(
    messages: Iterable[ChatMessage],
    session: ChatSession,
    caller_id: str,
) -> list[ChatMessage]:
    """Message-level and session-level ownership must agree; fail closed otherwise."""
    owned = list(messages)
    foreign = [message.id for message in owned if message.owner_id != caller_id]
    if foreign:
        logger.error(
            f"Ownership mismatch in chat session {session.id}: owner={session.owner_id} "
            f"foreign_message_ids={foreign}"
        )
        raise ForbiddenError("You are not authorized to access this chat session.")
    return owned
