"""
Unit tests for ChatService.

Real SQLite repository, scripted completion provider.
"""

from unittest.mock import AsyncMock

import pytest

from chatapp.core.exceptions import DependencyFailureError, ForbiddenError, NotFoundError
from chatapp.models.chat_session import (
    IMAGE_FAILURE_PLACEHOLDER,
    TEXT_EMPTY_FALLBACK,
    TEXT_FAILURE_FALLBACK,
    ChatMessage,
    ChatSession,
)
from chatapp.models.completion import CompletionResult
from chatapp.models.enums import MessageRole, MessageType
from chatapp.services.chat_service import (
    ChatService,
    image_reply_or_placeholder,
    text_reply_or_fallback,
)
from chatapp.utils.datetime_utils import now_utc

MISSING_ID = "00000000-0000-0000-0000-000000000000"


# ============================================
# Fallback selection
# ============================================


class TestFallbacks:
    def test_text_reply_passes_through(self):
        assert text_reply_or_fallback(CompletionResult.success_text("hi")) == "hi"

    @pytest.mark.parametrize("code", ["empty_response", "malformed_response"])
    def test_text_unusable_reply_uses_empty_fallback(self, code):
        assert text_reply_or_fallback(CompletionResult.failure(code)) == TEXT_EMPTY_FALLBACK

    @pytest.mark.parametrize("code", ["timeout", "request_failed", "provider_unavailable"])
    def test_text_failure_uses_failure_fallback(self, code):
        assert text_reply_or_fallback(CompletionResult.failure(code)) == TEXT_FAILURE_FALLBACK

    def test_image_failure_uses_placeholder(self):
        result = CompletionResult.failure("no_image_in_response")
        assert image_reply_or_placeholder(result) == IMAGE_FAILURE_PLACEHOLDER


# ============================================
# Sessions
# ============================================


class TestSessionProcedures:
    @pytest.mark.asyncio
    async def test_users_only_see_their_own_sessions(self, chat_service, user_id, other_user_id):
        mine = await chat_service.create_session(user_id, "mine")
        await chat_service.create_session(other_user_id, "theirs")

        sessions = await chat_service.list_sessions(user_id)

        assert [s.id for s in sessions] == [mine.id]

    @pytest.mark.asyncio
    async def test_rename_own_session(self, chat_service, user_id):
        session = await chat_service.create_session(user_id)

        renamed = await chat_service.rename_session(user_id, session.id, "Trip")

        assert renamed.title == "Trip"
        assert (await chat_service.list_sessions(user_id))[0].title == "Trip"

    @pytest.mark.asyncio
    async def test_rename_twice_with_same_title_is_idempotent(self, chat_service, user_id):
        session = await chat_service.create_session(user_id)

        first = await chat_service.rename_session(user_id, session.id, "Same")
        second = await chat_service.rename_session(user_id, session.id, "Same")

        assert first == second

    @pytest.mark.asyncio
    async def test_rename_foreign_session_forbidden(self, chat_service, chat_repo, user_id, other_user_id):
        session = await chat_service.create_session(user_id, "Original")

        with pytest.raises(ForbiddenError):
            await chat_service.rename_session(other_user_id, session.id, "Mine now")

        assert (await chat_repo.get_session(session.id)).title == "Original"

    @pytest.mark.asyncio
    async def test_rename_missing_session_not_found(self, chat_service, user_id):
        with pytest.raises(NotFoundError):
            await chat_service.rename_session(user_id, MISSING_ID, "Nope")

    @pytest.mark.asyncio
    async def test_delete_removes_session_and_history(self, chat_service, chat_repo, user_id):
        session = await chat_service.create_session(user_id)
        await chat_service.send_text_message(user_id, session.id, "hello")

        result = await chat_service.delete_session(user_id, session.id)

        assert result.success is True
        assert await chat_repo.get_session(session.id) is None
        assert await chat_repo.list_messages(session.id) == []

    @pytest.mark.asyncio
    async def test_delete_foreign_session_forbidden(self, chat_service, chat_repo, user_id, other_user_id):
        session = await chat_service.create_session(user_id)
        await chat_service.send_text_message(user_id, session.id, "keep")

        with pytest.raises(ForbiddenError):
            await chat_service.delete_session(other_user_id, session.id)

        assert await chat_repo.get_session(session.id) is not None
        assert len(await chat_repo.list_messages(session.id)) == 2

    @pytest.mark.asyncio
    async def test_delete_twice_reports_not_found(self, chat_service, user_id):
        session = await chat_service.create_session(user_id)
        await chat_service.delete_session(user_id, session.id)

        with pytest.raises(NotFoundError):
            await chat_service.delete_session(user_id, session.id)


# ============================================
# Messages
# ============================================


class TestMessageProcedures:
    @pytest.mark.asyncio
    async def test_send_text_stores_prompt_and_reply(self, chat_service, fake_provider, user_id):
        session = await chat_service.create_session(user_id)

        result = await chat_service.send_text_message(user_id, session.id, "What is 2+2?")

        assert result.success is True
        assert result.user_message == "What is 2+2?"
        assert result.ai_message == fake_provider.text_result.text
        assert fake_provider.text_prompts == ["What is 2+2?"]

        messages = await chat_service.list_messages(user_id, session.id)
        assert [(m.role, m.type, m.content) for m in messages] == [
            (MessageRole.USER, MessageType.TEXT, "What is 2+2?"),
            (MessageRole.MODEL, MessageType.TEXT, fake_provider.text_result.text),
        ]

    @pytest.mark.asyncio
    async def test_n_exchanges_alternate_in_order(self, chat_service, user_id):
        session = await chat_service.create_session(user_id)
        prompts = [f"prompt {i}" for i in range(4)]
        for prompt in prompts:
            await chat_service.send_text_message(user_id, session.id, prompt)

        messages = await chat_service.list_messages(user_id, session.id)

        assert len(messages) == 2 * len(prompts)
        assert [m.role for m in messages] == [MessageRole.USER, MessageRole.MODEL] * len(prompts)
        assert [m.content for m in messages[::2]] == prompts

    @pytest.mark.asyncio
    async def test_text_failure_stores_fallback(self, chat_service, fake_provider, user_id):
        fake_provider.text_result = CompletionResult.failure("timeout")
        session = await chat_service.create_session(user_id)

        result = await chat_service.send_text_message(user_id, session.id, "hello?")

        assert result.success is True
        assert result.ai_message == TEXT_FAILURE_FALLBACK
        messages = await chat_service.list_messages(user_id, session.id)
        assert messages[-1].content == TEXT_FAILURE_FALLBACK

    @pytest.mark.asyncio
    async def test_empty_reply_stores_empty_fallback(self, chat_service, fake_provider, user_id):
        fake_provider.text_result = CompletionResult.failure("empty_response")
        session = await chat_service.create_session(user_id)

        result = await chat_service.send_text_message(user_id, session.id, "hello?")

        assert result.ai_message == TEXT_EMPTY_FALLBACK

    @pytest.mark.asyncio
    async def test_provider_exception_stores_fallback(self, chat_repo, user_id):
        provider = AsyncMock()
        provider.generate_text.side_effect = RuntimeError("boom")
        service = ChatService(chat_repo=chat_repo, completion_provider=provider)
        session = await service.create_session(user_id)

        result = await service.send_text_message(user_id, session.id, "hello")

        assert result.ai_message == TEXT_FAILURE_FALLBACK

    @pytest.mark.asyncio
    async def test_no_provider_stores_fallback(self, chat_repo, user_id):
        service = ChatService(chat_repo=chat_repo, completion_provider=None)
        session = await service.create_session(user_id)

        text = await service.send_text_message(user_id, session.id, "hello")
        image = await service.generate_image(user_id, session.id, "a cat")

        assert text.ai_message == TEXT_FAILURE_FALLBACK
        assert image.image_url == IMAGE_FAILURE_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_generate_image_stores_prompt_and_image(self, chat_service, fake_provider, user_id):
        session = await chat_service.create_session(user_id)

        result = await chat_service.generate_image(user_id, session.id, "a red fox")

        assert result.success is True
        assert result.image_url == fake_provider.image_result.image_data_uri
        messages = await chat_service.list_messages(user_id, session.id)
        assert [(m.role, m.type, m.content) for m in messages] == [
            (MessageRole.USER, MessageType.IMAGE_PROMPT, "a red fox"),
            (MessageRole.MODEL, MessageType.IMAGE, fake_provider.image_result.image_data_uri),
        ]

    @pytest.mark.asyncio
    async def test_image_failure_stores_placeholder(self, chat_service, fake_provider, user_id):
        fake_provider.image_result = CompletionResult.failure("no_image_in_response")
        session = await chat_service.create_session(user_id)

        result = await chat_service.generate_image(user_id, session.id, "a red fox")

        assert result.image_url == IMAGE_FAILURE_PLACEHOLDER
        messages = await chat_service.list_messages(user_id, session.id)
        assert messages[-1].type == MessageType.IMAGE
        assert messages[-1].content == IMAGE_FAILURE_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_foreign_session_is_untouched(
        self, chat_service, chat_repo, fake_provider, user_id, other_user_id
    ):
        session = await chat_service.create_session(user_id)

        with pytest.raises(ForbiddenError):
            await chat_service.send_text_message(other_user_id, session.id, "sneaky")
        with pytest.raises(ForbiddenError):
            await chat_service.generate_image(other_user_id, session.id, "sneaky")
        with pytest.raises(ForbiddenError):
            await chat_service.list_messages(other_user_id, session.id)

        assert await chat_repo.list_messages(session.id) == []
        assert fake_provider.text_prompts == []
        assert fake_provider.image_prompts == []

    @pytest.mark.asyncio
    async def test_missing_session_not_found(self, chat_service, user_id):
        with pytest.raises(NotFoundError):
            await chat_service.send_text_message(user_id, MISSING_ID, "hello")
        with pytest.raises(NotFoundError):
            await chat_service.list_messages(user_id, MISSING_ID)

    @pytest.mark.asyncio
    async def test_model_message_write_failure_is_fatal(self, chat_repo, fake_provider, user_id):
        session = await chat_repo.create_session(user_id)
        real_add = chat_repo.add_message
        calls = []

        async def add_then_fail(*args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise DependencyFailureError("Failed to save model message.")
            return await real_add(*args, **kwargs)

        chat_repo.add_message = add_then_fail
        service = ChatService(chat_repo=chat_repo, completion_provider=fake_provider)

        with pytest.raises(DependencyFailureError):
            await service.send_text_message(user_id, session.id, "hello")

        # The user message was committed before the completion call
        stored = await chat_repo.list_messages(session.id)
        assert [m.role for m in stored] == [MessageRole.USER]

    @pytest.mark.asyncio
    async def test_long_history_is_returned_in_full(self, chat_service, chat_repo, user_id):
        session = await chat_service.create_session(user_id)
        for i in range(501):
            await chat_repo.add_message(user_id, session.id, MessageRole.USER, MessageType.TEXT, f"q{i}")
            await chat_repo.add_message(user_id, session.id, MessageRole.MODEL, MessageType.TEXT, f"a{i}")

        messages = await chat_service.list_messages(user_id, session.id)

        assert len(messages) == 1002
        assert [m.content for m in messages[-2:]] == ["q500", "a500"]

    @pytest.mark.asyncio
    async def test_many_sessions_are_listed_in_full(self, chat_service, user_id):
        for i in range(105):
            await chat_service.create_session(user_id, f"chat {i}")

        sessions = await chat_service.list_sessions(user_id)

        assert len(sessions) == 105
        assert sessions[0].title == "chat 104"


# ============================================
# Ownership integrity
# ============================================


class TestOwnershipIntegrity:
    @pytest.mark.asyncio
    async def test_foreign_message_in_owned_session_fails_closed(self, user_id, other_user_id, caplog):
        session = ChatSession(id="s-1", owner_id=user_id, title="t", created_at=now_utc())
        repo = AsyncMock()
        repo.get_session.return_value = session
        repo.list_messages.return_value = [
            ChatMessage(
                id="m-1",
                session_id="s-1",
                owner_id=user_id,
                role=MessageRole.USER,
                type=MessageType.TEXT,
                content="mine",
                created_at=now_utc(),
            ),
            ChatMessage(
                id="m-2",
                session_id="s-1",
                owner_id=other_user_id,
                role=MessageRole.MODEL,
                type=MessageType.TEXT,
                content="not mine",
                created_at=now_utc(),
            ),
        ]
        service = ChatService(chat_repo=repo)

        with pytest.raises(ForbiddenError):
            await service.list_messages(user_id, "s-1")

        assert "Ownership mismatch" in caplog.text
        assert "m-2" in caplog.text
