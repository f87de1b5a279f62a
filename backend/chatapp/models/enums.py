"""
Enum definitions for the application.

Values are persisted and exposed over RPC, so renaming one needs a migration.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Who authored a message."""

    USER = "user"
    MODEL = "model"


class MessageType(str, Enum):
    """
    How a message's content is interpreted.

    TEXT = literal text
    IMAGE = image reference (data URI or URL)
    IMAGE_PROMPT = text prompt that requested an image
    """

    TEXT = "text"
    IMAGE = "image"
    IMAGE_PROMPT = "image_prompt"
