"""
Chat procedures.

Every operation takes the caller's verified user id, never one from input.
Row-addressing operations go through require_owner before touching rows.
"""

from __future__ import annotations

from typing import Optional

from chatapp.core.exceptions import NotFoundError
from chatapp.core.logger import logger
from chatapp.interfaces.chat_session_repository import IChatSessionRepository
from chatapp.interfaces.completion_provider import ICompletionProvider
from chatapp.models.chat_session import (
    IMAGE_FAILURE_PLACEHOLDER,
    TEXT_EMPTY_FALLBACK,
    TEXT_FAILURE_FALLBACK,
    ChatMessage,
    ChatSession,
    GenerateImageResult,
    SendTextResult,
    SuccessResult,
)
from chatapp.models.completion import CompletionResult
from chatapp.models.enums import MessageRole, MessageType
from chatapp.services.ownership import ensure_messages_owned, require_owner

# Completion error codes meaning "the service answered but with nothing usable"
_EMPTY_REPLY_CODES = {"empty_response", "malformed_response"}


def text_reply_or_fallback(result: CompletionResult) -> str:
    """Model message content for a text completion outcome."""
    if result.ok and result.text:
        return result.text
    if result.error_code in _EMPTY_REPLY_CODES:
        return TEXT_EMPTY_FALLBACK
    return TEXT_FAILURE_FALLBACK


def image_reply_or_placeholder(result: CompletionResult) -> str:
    """Model message content for an image completion outcome."""
    if result.ok and result.image_data_uri:
        return result.image_data_uri
    return IMAGE_FAILURE_PLACEHOLDER


class ChatService:
    """Access-controlled chat session and message operations."""

    def __init__(
        self,
        chat_repo: IChatSessionRepository,
        completion_provider: Optional[ICompletionProvider] = None,
    ):
        self._chat_repo = chat_repo
        self._completion_provider = completion_provider

    async def list_sessions(self, user_id: str) -> list[ChatSession]:
        sessions = await self._chat_repo.list_sessions(user_id)
        logger.info(f"Fetched {len(sessions)} chat sessions for user {user_id}")
        return sessions

    async def create_session(self, user_id: str, title: Optional[str] = None) -> ChatSession:
        session = await self._chat_repo.create_session(user_id, title=title)
        logger.info(f"Created chat session {session.id} for user {user_id}")
        return session

    async def rename_session(self, user_id: str, session_id: str, new_title: str) -> ChatSession:
        await require_owner(self._chat_repo, session_id, user_id)
        updated = await self._chat_repo.rename_session(user_id, session_id, new_title)
        if not updated:
            # Deleted between the ownership check and the update
            raise NotFoundError(f"Chat session {session_id} not found")
        logger.info(f"Chat session {session_id} renamed by user {user_id}")
        return updated

    async def delete_session(self, user_id: str, session_id: str) -> SuccessResult:
        await require_owner(self._chat_repo, session_id, user_id)
        deleted = await self._chat_repo.delete_session(user_id, session_id)
        if not deleted:
            raise NotFoundError(f"Chat session {session_id} not found")
        logger.info(f"Deleted chat session {session_id} for user {user_id}")
        return SuccessResult()

    async def list_messages(self, user_id: str, session_id: str) -> list[ChatMessage]:
        session = await require_owner(self._chat_repo, session_id, user_id)
        messages = await self._chat_repo.list_messages(session_id)
        return ensure_messages_owned(messages, session, user_id)

    async def send_text_message(self, user_id: str, session_id: str, prompt: str) -> SendTextResult:
        """
        Store the prompt, ask the completion service, store the reply.

        The user message is committed before the completion call. A failed
        or empty completion still stores a model message (fallback text),
        so the transcript records every attempt.
        """
        await require_owner(self._chat_repo, session_id, user_id)
        await self._chat_repo.add_message(
            user_id, session_id, MessageRole.USER, MessageType.TEXT, prompt
        )

        result = await self._complete_text(prompt)
        reply = text_reply_or_fallback(result)
        if not result.ok:
            logger.warning(
                f"Text completion failed for session {session_id} ({result.error_code}); "
                "storing fallback reply"
            )

        await self._chat_repo.add_message(
            user_id, session_id, MessageRole.MODEL, MessageType.TEXT, reply
        )
        return SendTextResult(user_message=prompt, ai_message=reply)

    async def generate_image(self, user_id: str, session_id: str, prompt: str) -> GenerateImageResult:
        """
        Store the image prompt, request an image, store the image reference.

        Falls back to a placeholder image URL when generation fails.
        """
        await require_owner(self._chat_repo, session_id, user_id)
        await self._chat_repo.add_message(
            user_id, session_id, MessageRole.USER, MessageType.IMAGE_PROMPT, prompt
        )

        result = await self._complete_image(prompt)
        image_ref = image_reply_or_placeholder(result)
        if not result.ok:
            logger.warning(
                f"Image generation failed for session {session_id} ({result.error_code}); "
                "storing placeholder"
            )

        await self._chat_repo.add_message(
            user_id, session_id, MessageRole.MODEL, MessageType.IMAGE, image_ref
        )
        return GenerateImageResult(image_url=image_ref)

    async def _complete_text(self, prompt: str) -> CompletionResult:
        if not self._completion_provider:
            return CompletionResult.failure("provider_unavailable")
        try:
            return await self._completion_provider.generate_text(prompt)
        except Exception as exc:
            logger.warning(f"Completion provider raised: {exc}")
            return CompletionResult.failure("request_failed")

    async def _complete_image(self, prompt: str) -> CompletionResult:
        if not self._completion_provider:
            return CompletionResult.failure("provider_unavailable")
        try:
            return await self._completion_provider.generate_image(prompt)
        except Exception as exc:
            logger.warning(f"Completion provider raised: {exc}")
            return CompletionResult.failure("request_failed")
