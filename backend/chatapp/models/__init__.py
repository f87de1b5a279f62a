"""Pydantic models (schemas) for the application."""

from chatapp.models.chat_session import (
    ChatMessage,
    ChatSession,
    CreateSessionInput,
    GenerateImageResult,
    PromptInput,
    RenameSessionInput,
    SendTextResult,
    SessionRef,
    SuccessResult,
)
from chatapp.models.completion import CompletionResult
from chatapp.models.enums import MessageRole, MessageType
from chatapp.models.rpc import RpcCall, RpcErrorBody, RpcResponse

__all__ = [
    # Enums
    "MessageRole",
    "MessageType",
    # Chat
    "ChatSession",
    "ChatMessage",
    "CreateSessionInput",
    "RenameSessionInput",
    "SessionRef",
    "PromptInput",
    "SuccessResult",
    "SendTextResult",
    "GenerateImageResult",
    # Completion
    "CompletionResult",
    # RPC
    "RpcCall",
    "RpcErrorBody",
    "RpcResponse",
]
