"""
Shared fixtures.

Repositories run against an in-memory SQLite database; completion calls
go to a scripted fake provider.
"""

from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chatapp.infrastructure.local.chat_session_repository import SqlChatSessionRepository
from chatapp.infrastructure.local.database import Base, configure_engine
from chatapp.interfaces.completion_provider import ICompletionProvider
from chatapp.models.completion import CompletionResult
from chatapp.services.chat_service import ChatService

FAKE_TEXT_REPLY = "Hello from Gemini"
FAKE_IMAGE_URI = "data:image/png;base64,iVBORw0KGgo="


class FakeCompletionProvider(ICompletionProvider):
    """Returns preset results and records prompts."""

    def __init__(
        self,
        text_result: Optional[CompletionResult] = None,
        image_result: Optional[CompletionResult] = None,
    ):
        self.text_result = text_result or CompletionResult.success_text(FAKE_TEXT_REPLY)
        self.image_result = image_result or CompletionResult.success_image(FAKE_IMAGE_URI)
        self.text_prompts: list[str] = []
        self.image_prompts: list[str] = []

    async def generate_text(self, prompt: str) -> CompletionResult:
        self.text_prompts.append(prompt)
        return self.text_result

    async def generate_image(self, prompt: str) -> CompletionResult:
        self.image_prompts.append(prompt)
        return self.image_result

    def get_model_name(self) -> str:
        return "fake"


@pytest_asyncio.fixture
async def session_factory():
    """Async session factory bound to a fresh in-memory database."""
    engine = configure_engine(
        create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def chat_repo(session_factory):
    return SqlChatSessionRepository(session_factory=session_factory)


@pytest.fixture
def fake_provider():
    return FakeCompletionProvider()


@pytest.fixture
def chat_service(chat_repo, fake_provider):
    return ChatService(chat_repo=chat_repo, completion_provider=fake_provider)


@pytest.fixture
def user_id():
    return "alice"


@pytest.fixture
def other_user_id():
    return "bob"
