"""
Gemini API completion provider.

Uses the Gemini API with an API key (no GCP project required).
Text and image calls may use different keys.
"""

from typing import Any

from google import genai
from google.genai.types import GenerateContentConfig

from chatapp.core.config import Settings, get_settings
from chatapp.core.exceptions import CompletionError
from chatapp.core.logger import logger
from chatapp.interfaces.completion_provider import ICompletionProvider
from chatapp.models.completion import CompletionResult
from chatapp.services.llm_utils import call_with_timeout, extract_image_data_uri, extract_text


class GeminiAPIProvider(ICompletionProvider):
    """Gemini API provider using API Key (works in local/gcp)."""

    def __init__(
        self,
        text_model: str,
        image_model: str,
        settings: Settings | None = None,
    ):
        """
        Initialize Gemini API provider.

        Args:
            text_model: Gemini model for text replies (e.g., "gemini-2.0-flash")
            image_model: Gemini model able to return inline images
            settings: Optional settings override
        """
        self._text_model = text_model
        self._image_model = image_model
        self._settings = settings or get_settings()
        self._text_client, self._image_client = self._build_clients()

    def _build_clients(self) -> tuple[Any, Any]:
        text_key = self._settings.text_api_key
        image_key = self._settings.image_api_key
        if not text_key and not image_key:
            raise CompletionError(
                "GOOGLE_API_KEY (or GOOGLE_API_KEY_TEXT / GOOGLE_API_KEY_IMAGE) is required "
                "for Gemini API provider. Get your API key from https://aistudio.google.com/apikey"
            )
        text_client = genai.Client(api_key=text_key) if text_key else None
        if image_key == text_key:
            return text_client, text_client
        image_client = genai.Client(api_key=image_key) if image_key else None
        return text_client, image_client

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"Gemini API ({self._text_model} / {self._image_model})"

    async def generate_text(self, prompt: str) -> CompletionResult:
        if self._text_client is None:
            return CompletionResult.failure("missing_text_api_key")

        async def _call() -> CompletionResult:
            response = await self._text_client.aio.models.generate_content(
                model=self._text_model,
                contents=prompt,
                config=GenerateContentConfig(
                    max_output_tokens=self._settings.COMPLETION_MAX_OUTPUT_TOKENS,
                ),
            )
            return extract_text(response)

        result = await call_with_timeout(
            f"Gemini text ({self._text_model})",
            _call,
            timeout_seconds=self._settings.COMPLETION_TIMEOUT_SECONDS,
        )
        if not result.ok:
            logger.warning(f"Gemini text completion unusable: {result.error_code}")
        return result

    async def generate_image(self, prompt: str) -> CompletionResult:
        if self._image_client is None:
            return CompletionResult.failure("missing_image_api_key")

        async def _call() -> CompletionResult:
            response = await self._image_client.aio.models.generate_content(
                model=self._image_model,
                contents=prompt,
                config=GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
            )
            return extract_image_data_uri(response)

        result = await call_with_timeout(
            f"Gemini image ({self._image_model})",
            _call,
            timeout_seconds=self._settings.COMPLETION_TIMEOUT_SECONDS,
        )
        if not result.ok:
            logger.warning(f"Gemini image generation unusable: {result.error_code}")
        return result
