"""
Chat session and message models.

Row shapes returned by the procedure layer, plus the input schemas each
procedure validates before touching persistence.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatapp.models.enums import MessageRole, MessageType

DEFAULT_SESSION_TITLE = "New Chat"
TITLE_MAX_LENGTH = 100
PROMPT_MAX_LENGTH = 10000

TEXT_FAILURE_FALLBACK = "Apologies, I couldn't generate a text response right now."
TEXT_EMPTY_FALLBACK = "Apologies, I couldn't get a valid text response from Gemini."
IMAGE_FAILURE_PLACEHOLDER = "https://placehold.co/300x200/FF0000/FFFFFF?text=Image+Gen+Failed"


class ChatSession(BaseModel):
    """Chat session row."""

    id: str = Field(..., description="Session ID (UUID)")
    owner_id: str = Field(..., description="Owner user ID")
    title: str = Field(DEFAULT_SESSION_TITLE, max_length=TITLE_MAX_LENGTH)
    created_at: datetime


class ChatMessage(BaseModel):
    """Chat message row. Immutable once stored."""

    id: str = Field(..., description="Message ID (UUID)")
    session_id: str
    owner_id: str = Field(..., description="Owner user ID")
    role: MessageRole
    type: MessageType
    content: str = ""
    created_at: datetime


# ===========================================
# Procedure inputs
# ===========================================


def _validate_uuid(value: str) -> str:
    try:
        return str(UUID(value))
    except (ValueError, TypeError, AttributeError):
        raise ValueError("must be a valid UUID")


class _ProcedureInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CreateSessionInput(_ProcedureInput):
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        if not stripped:
            raise ValueError("title cannot be blank")
        return stripped


class SessionRef(_ProcedureInput):
    session_id: str = Field(..., alias="sessionId")

    @field_validator("session_id")
    @classmethod
    def _check_session_id(cls, value: str) -> str:
        return _validate_uuid(value)


class RenameSessionInput(SessionRef):
    new_title: str = Field(..., alias="newTitle", max_length=TITLE_MAX_LENGTH)

    @field_validator("new_title")
    @classmethod
    def _strip_new_title(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Chat title cannot be empty")
        return stripped


class PromptInput(SessionRef):
    prompt: str = Field(..., max_length=PROMPT_MAX_LENGTH)

    @field_validator("prompt")
    @classmethod
    def _check_prompt(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt cannot be empty")
        return value


# ===========================================
# Procedure results
# ===========================================


class SuccessResult(BaseModel):
    success: bool = True


class SendTextResult(SuccessResult):
    model_config = ConfigDict(populate_by_name=True)

    user_message: str = Field(..., serialization_alias="userMessage")
    ai_message: str = Field(..., serialization_alias="aiMessage")


class GenerateImageResult(SuccessResult):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., serialization_alias="imageUrl")
