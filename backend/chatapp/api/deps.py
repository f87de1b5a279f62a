"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from chatapp.core.config import Settings, get_settings
from chatapp.core.exceptions import AuthenticationError, CompletionError
from chatapp.core.logger import logger
from chatapp.interfaces.auth_provider import IAuthProvider, User
from chatapp.interfaces.chat_session_repository import IChatSessionRepository
from chatapp.interfaces.completion_provider import ICompletionProvider
from chatapp.services.chat_service import ChatService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_chat_session_repository() -> IChatSessionRepository:
    """Get chat session repository instance."""
    from chatapp.infrastructure.local.chat_session_repository import SqlChatSessionRepository

    return SqlChatSessionRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def _build_completion_provider() -> ICompletionProvider:
    """
    Build the completion provider selected by COMPLETION_PROVIDER.

    Supports:
    - gemini-api: Gemini API (API Key, works in local/gcp)
    - vertex-ai: Vertex AI (GCP only, service account)
    - litellm: LiteLLM (text only)
    """
    settings = get_settings()

    if settings.COMPLETION_PROVIDER == "gemini-api":
        from chatapp.infrastructure.local.gemini_api_provider import GeminiAPIProvider

        return GeminiAPIProvider(settings.GEMINI_TEXT_MODEL, settings.GEMINI_IMAGE_MODEL)

    elif settings.COMPLETION_PROVIDER == "vertex-ai":
        if not settings.is_gcp:
            raise CompletionError(
                "Vertex AI provider requires ENVIRONMENT=gcp. "
                "Use gemini-api or litellm for local development."
            )
        from chatapp.infrastructure.gcp.gemini_provider import VertexAIProvider

        return VertexAIProvider(settings.GEMINI_TEXT_MODEL, settings.GEMINI_IMAGE_MODEL)

    elif settings.COMPLETION_PROVIDER == "litellm":
        from chatapp.infrastructure.local.litellm_provider import LiteLLMProvider

        return LiteLLMProvider(settings.LITELLM_MODEL)

    else:
        raise CompletionError(f"Unknown COMPLETION_PROVIDER: {settings.COMPLETION_PROVIDER}")


def get_completion_provider() -> Optional[ICompletionProvider]:
    """
    Get the completion provider, or None when it cannot be configured.

    A missing provider only degrades generation to fallback replies; it
    never blocks session or history procedures.
    """
    try:
        provider = _build_completion_provider()
    except CompletionError as e:
        logger.error(f"Completion provider unavailable: {e.message}")
        return None
    logger.debug(f"Using completion provider: {provider.get_model_name()}")
    return provider


def build_auth_provider(settings: Settings) -> IAuthProvider:
    """
    Build the auth provider selected by AUTH_PROVIDER.

    The mock provider takes the bearer token as the user id, so it is
    refused outside local development.
    """
    if settings.AUTH_PROVIDER == "oidc":
        from chatapp.infrastructure.auth.oidc_auth import OidcAuthProvider

        return OidcAuthProvider(settings)

    if not settings.is_local:
        raise ValueError(
            f"AUTH_PROVIDER=mock is not allowed with ENVIRONMENT={settings.ENVIRONMENT}. "
            "Configure AUTH_PROVIDER=oidc."
        )

    from chatapp.infrastructure.local.mock_auth import MockAuthProvider

    logger.warning("Using mock authentication: bearer tokens are trusted as user ids")
    return MockAuthProvider(enabled=True)


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    return build_auth_provider(get_settings())


# ===========================================
# Service Dependencies
# ===========================================


def get_chat_service(
    chat_repo: IChatSessionRepository = Depends(get_chat_session_repository),
    completion_provider: Optional[ICompletionProvider] = Depends(get_completion_provider),
) -> ChatService:
    return ChatService(chat_repo=chat_repo, completion_provider=completion_provider)


# ===========================================
# User Authentication
# ===========================================


def _extract_token(authorization: Optional[str], request: Request) -> Optional[str]:
    """Bearer header first, then the identity provider's session cookie."""
    if authorization:
        try:
            scheme, token = authorization.split()
        except ValueError:
            raise AuthenticationError("Invalid authorization header format")
        if scheme.lower() != "bearer":
            raise AuthenticationError("Invalid authorization header format")
        return token

    cookie_name = get_settings().AUTH_SESSION_COOKIE
    return request.cookies.get(cookie_name) if cookie_name else None


async def get_optional_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> Optional[User]:
    """
    Resolve the caller's identity, or None if the request is unauthenticated.

    Procedures decide how to fail; the RPC layer turns None into
    UNAUTHORIZED for every chat procedure.
    """
    if not auth_provider.is_enabled():
        # Mock user for development
        return User(id="dev_user", email="dev@example.com", display_name="Developer")

    try:
        token = _extract_token(authorization, request)
        if not token:
            return None
        return await auth_provider.verify_token(token)
    except AuthenticationError as e:
        logger.info(f"Rejected credentials: {e.message}")
        return None


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
