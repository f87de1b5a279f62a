"""
LiteLLM completion provider.

Routes text prompts to OpenAI, Bedrock and other providers via LiteLLM.
Supports custom endpoints (api_base) for proxy servers. Image generation
is not offered through this provider.
"""

import os
from typing import Any, Optional

import litellm

from chatapp.core.config import Settings, get_settings
from chatapp.core.logger import logger
from chatapp.interfaces.completion_provider import ICompletionProvider
from chatapp.models.completion import CompletionResult
from chatapp.services.llm_utils import call_with_timeout


class LiteLLMProvider(ICompletionProvider):
    """LiteLLM provider with custom endpoint support."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
        settings: Settings | None = None,
    ):
        """
        Initialize LiteLLM provider.

        Args:
            model_name: LiteLLM model identifier (e.g., "openai/gpt-4o-mini")
            api_base: Custom API endpoint URL (optional, for proxy servers)
                     Note: Do NOT include /v1 suffix - LiteLLM adds it automatically
            api_key: Custom API key (optional, overrides default)
        """
        self._model_name = model_name
        self._settings = settings or get_settings()
        self._api_base = api_base or self._settings.LITELLM_API_BASE or None
        self._api_key = api_key or self._settings.LITELLM_API_KEY or None

        if self._settings.DEBUG:
            os.environ.setdefault("LITELLM_LOG", "DEBUG")

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        if self._api_base:
            return f"LiteLLM ({self._model_name} @ {self._api_base})"
        return f"LiteLLM ({self._model_name})"

    async def generate_text(self, prompt: str) -> CompletionResult:
        kwargs: dict[str, Any] = {
            "model": self._model_name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._settings.COMPLETION_MAX_OUTPUT_TOKENS,
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key

        async def _call() -> CompletionResult:
            response = await litellm.acompletion(**kwargs)
            choices = getattr(response, "choices", None) or []
            text = (choices[0].message.content or "").strip() if choices else ""
            if not text:
                return CompletionResult.failure("empty_response")
            return CompletionResult.success_text(text)

        result = await call_with_timeout(
            f"LiteLLM text ({self._model_name})",
            _call,
            timeout_seconds=self._settings.COMPLETION_TIMEOUT_SECONDS,
        )
        if not result.ok:
            logger.warning(f"LiteLLM completion unusable: {result.error_code}")
        return result

    async def generate_image(self, prompt: str) -> CompletionResult:
        return CompletionResult.failure("image_not_supported", self.get_model_name())
