"""
Application configuration using Pydantic Settings.

Environment-based infrastructure switching is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "gcp"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./chat.db"

    # ===========================================
    # Completion Service
    # ===========================================
    # Completion provider: "gemini-api" | "vertex-ai" | "litellm"
    # - gemini-api: Gemini API (API Key, works in local/gcp)
    # - vertex-ai: Vertex AI (GCP only, service account)
    # - litellm: LiteLLM (text only; OpenAI, Bedrock, etc.)
    COMPLETION_PROVIDER: Literal["gemini-api", "vertex-ai", "litellm"] = "gemini-api"

    GEMINI_TEXT_MODEL: str = "gemini-2.0-flash"
    GEMINI_IMAGE_MODEL: str = "gemini-2.0-flash-preview-image-generation"

    # Shared key, used when the per-modality key is empty
    GOOGLE_API_KEY: str = ""
    GOOGLE_API_KEY_TEXT: str = ""
    GOOGLE_API_KEY_IMAGE: str = ""

    GOOGLE_CLOUD_PROJECT: str = ""
    GOOGLE_CLOUD_LOCATION: str = "us-central1"

    LITELLM_MODEL: str = "openai/gpt-4o-mini"
    LITELLM_API_BASE: str = ""
    LITELLM_API_KEY: str = ""

    # Upper bound for a single completion call; a timeout takes the fallback path
    COMPLETION_TIMEOUT_SECONDS: float = 30.0
    COMPLETION_MAX_OUTPUT_TOKENS: int = 2048

    # ===========================================
    # Auth (OIDC/JWT)
    # ===========================================
    AUTH_PROVIDER: Literal["mock", "oidc"] = "mock"
    OIDC_ISSUER: str = ""
    OIDC_AUDIENCE: str = ""
    OIDC_JWKS_URL: str = ""
    # Cookie carrying the identity provider's ID token (browser clients)
    AUTH_SESSION_COOKIE: str = "appSession"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )
    MAX_BATCH_SIZE: int = 20

    @property
    def is_gcp(self) -> bool:
        """Check if running in GCP environment."""
        return self.ENVIRONMENT == "gcp"

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"

    @property
    def text_api_key(self) -> str:
        return self.GOOGLE_API_KEY_TEXT or self.GOOGLE_API_KEY

    @property
    def image_api_key(self) -> str:
        return self.GOOGLE_API_KEY_IMAGE or self.GOOGLE_API_KEY


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
