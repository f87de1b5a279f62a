"""
Vertex AI provider for GCP environment.

Uses Vertex AI (requires GCP project and service account).
"""

from typing import Any

from google import genai

from chatapp.core.exceptions import CompletionError
from chatapp.infrastructure.local.gemini_api_provider import GeminiAPIProvider


class VertexAIProvider(GeminiAPIProvider):
    """Vertex AI provider for GCP environment (requires service account)."""

    def _build_clients(self) -> tuple[Any, Any]:
        if not self._settings.GOOGLE_CLOUD_PROJECT:
            raise CompletionError("GOOGLE_CLOUD_PROJECT is required for Vertex AI provider")

        # Credentials come from GOOGLE_APPLICATION_CREDENTIALS / the runtime service account
        client = genai.Client(
            vertexai=True,
            project=self._settings.GOOGLE_CLOUD_PROJECT,
            location=self._settings.GOOGLE_CLOUD_LOCATION,
        )
        return client, client

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"Vertex AI ({self._text_model} / {self._image_model})"
