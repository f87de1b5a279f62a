"""
SQLAlchemy implementation of the chat session repository.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from chatapp.core.exceptions import DependencyFailureError
from chatapp.core.logger import logger
from chatapp.infrastructure.local.database import ChatMessageORM, ChatSessionORM, get_session_factory
from chatapp.interfaces.chat_session_repository import IChatSessionRepository
from chatapp.models.chat_session import DEFAULT_SESSION_TITLE, ChatMessage, ChatSession
from chatapp.models.enums import MessageRole, MessageType
from chatapp.utils.datetime_utils import ensure_utc, next_after


class SqlChatSessionRepository(IChatSessionRepository):
    """Relational implementation of chat session repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _session_orm_to_model(self, orm: ChatSessionORM) -> ChatSession:
        """Convert session ORM object to Pydantic model."""
        return ChatSession(
            id=orm.id,
            owner_id=orm.owner_id,
            title=orm.title or DEFAULT_SESSION_TITLE,
            created_at=ensure_utc(orm.created_at),
        )

    def _message_orm_to_model(self, orm: ChatMessageORM) -> ChatMessage:
        """Convert message ORM object to Pydantic model."""
        return ChatMessage(
            id=orm.id,
            session_id=orm.session_id,
            owner_id=orm.owner_id,
            role=MessageRole(orm.role),
            type=MessageType(orm.type),
            content=orm.content or "",
            created_at=ensure_utc(orm.created_at),
        )

    @staticmethod
    def _failure(action: str, exc: SQLAlchemyError) -> DependencyFailureError:
        logger.error(f"Persistence failure while trying to {action}: {exc}")
        return DependencyFailureError(f"Failed to {action}.", details={"operation": action})

    async def create_session(self, owner_id: str, title: Optional[str] = None) -> ChatSession:
        """Create a chat session."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    latest = await session.scalar(
                        select(func.max(ChatSessionORM.created_at)).where(
                            ChatSessionORM.owner_id == owner_id
                        )
                    )
                    orm = ChatSessionORM(
                        owner_id=owner_id,
                        title=title or DEFAULT_SESSION_TITLE,
                        created_at=next_after(latest),
                    )
                    session.add(orm)
                await session.refresh(orm)
                return self._session_orm_to_model(orm)
        except SQLAlchemyError as exc:
            raise self._failure("create chat session", exc) from exc

    async def get_session(self, session_id: str) -> Optional[ChatSession]:
        """Get a session by id (owner not filtered)."""
        try:
            async with self._session_factory() as session:
                orm = await session.get(ChatSessionORM, session_id)
                return self._session_orm_to_model(orm) if orm else None
        except SQLAlchemyError as exc:
            raise self._failure("load chat session", exc) from exc

    async def list_sessions(
        self,
        owner_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ChatSession]:
        """List chat sessions for a user."""
        try:
            async with self._session_factory() as session:
                query = (
                    select(ChatSessionORM)
                    .where(ChatSessionORM.owner_id == owner_id)
                    .order_by(ChatSessionORM.created_at.desc(), ChatSessionORM.id.desc())
                    .offset(offset)
                )
                if limit is not None:
                    query = query.limit(limit)
                result = await session.execute(query)
                return [self._session_orm_to_model(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise self._failure("fetch chat sessions", exc) from exc

    async def rename_session(
        self,
        owner_id: str,
        session_id: str,
        title: str,
    ) -> Optional[ChatSession]:
        """Update a session title where id and owner match."""
        owned = and_(ChatSessionORM.id == session_id, ChatSessionORM.owner_id == owner_id)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(ChatSessionORM).where(owned).values(title=title)
                    )
                    if result.rowcount == 0:
                        return None
                    orm = await session.scalar(select(ChatSessionORM).where(owned))
                return self._session_orm_to_model(orm) if orm else None
        except SQLAlchemyError as exc:
            raise self._failure("rename chat session", exc) from exc

    async def delete_session(self, owner_id: str, session_id: str) -> bool:
        """Delete a session's messages, then the session, in one transaction."""
        owned = and_(ChatSessionORM.id == session_id, ChatSessionORM.owner_id == owner_id)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        delete(ChatMessageORM).where(
                            ChatMessageORM.session_id.in_(select(ChatSessionORM.id).where(owned))
                        )
                    )
                    result = await session.execute(delete(ChatSessionORM).where(owned))
                    return result.rowcount > 0
        except SQLAlchemyError as exc:
            raise self._failure("delete chat session", exc) from exc

    async def add_message(
        self,
        owner_id: str,
        session_id: str,
        role: MessageRole,
        message_type: MessageType,
        content: str,
    ) -> ChatMessage:
        """Add a message to a session."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    latest = await session.scalar(
                        select(func.max(ChatMessageORM.created_at)).where(
                            ChatMessageORM.session_id == session_id
                        )
                    )
                    message_orm = ChatMessageORM(
                        session_id=session_id,
                        owner_id=owner_id,
                        role=MessageRole(role).value,
                        type=MessageType(message_type).value,
                        content=content or "",
                        created_at=next_after(latest),
                    )
                    session.add(message_orm)
                await session.refresh(message_orm)
                return self._message_orm_to_model(message_orm)
        except SQLAlchemyError as exc:
            raise self._failure(f"save {MessageRole(role).value} message", exc) from exc

    async def list_messages(
        self,
        session_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ChatMessage]:
        """List messages for a session."""
        try:
            async with self._session_factory() as session:
                query = (
                    select(ChatMessageORM)
                    .where(ChatMessageORM.session_id == session_id)
                    .order_by(ChatMessageORM.created_at.asc())
                    .offset(offset)
                )
                if limit is not None:
                    query = query.limit(limit)
                result = await session.execute(query)
                return [self._message_orm_to_model(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise self._failure("fetch messages for session", exc) from exc
