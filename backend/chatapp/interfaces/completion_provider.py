"""
Completion provider interface.

Defines the contract for the external text/image generation service.
Implementations: Gemini API, Vertex AI, LiteLLM (text only).
"""

from abc import ABC, abstractmethod

from chatapp.models.completion import CompletionResult


class ICompletionProvider(ABC):
    """Abstract interface for completion providers."""

    @abstractmethod
    async def generate_text(self, prompt: str) -> CompletionResult:
        """
        Generate a text reply for a prompt.

        Never raises; failures and empty replies come back as a
        CompletionResult with error_code set.
        """
        pass

    @abstractmethod
    async def generate_image(self, prompt: str) -> CompletionResult:
        """
        Generate an image for a prompt.

        On success image_data_uri holds a data URI.
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass
