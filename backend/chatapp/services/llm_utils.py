"""
Shared completion invocation utilities.

Normalizes provider responses and failures into CompletionResult so the
procedure layer never sees library-specific error shapes.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Any, Awaitable, Callable, Optional

from chatapp.core.config import get_settings
from chatapp.core.logger import logger
from chatapp.models.completion import CompletionResult


async def call_with_timeout(
    label: str,
    call: Callable[[], Awaitable[CompletionResult]],
    timeout_seconds: Optional[float] = None,
) -> CompletionResult:
    """
    Run a provider call bounded by a timeout.

    Any exception or timeout is converted into a failed CompletionResult.
    """
    timeout = timeout_seconds if timeout_seconds is not None else get_settings().COMPLETION_TIMEOUT_SECONDS
    try:
        return await asyncio.wait_for(call(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"{label} timed out after {timeout}s")
        return CompletionResult.failure("timeout", f"no response within {timeout}s")
    except Exception as exc:
        logger.warning(f"{label} failed: {exc}")
        return CompletionResult.failure("request_failed", _maybe_detail(exc))


def extract_text(response: Any) -> CompletionResult:
    """Pull the reply text out of a generate_content response."""
    try:
        text = (getattr(response, "text", None) or "").strip()
    except (ValueError, AttributeError) as exc:
        return CompletionResult.failure("malformed_response", _maybe_detail(exc))
    if not text:
        return CompletionResult.failure("empty_response")
    return CompletionResult.success_text(text)


def extract_image_data_uri(response: Any) -> CompletionResult:
    """Find the first inline image in a generate_content response."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline else None
            if not data:
                continue
            mime_type = getattr(inline, "mime_type", None) or "image/png"
            return CompletionResult.success_image(to_data_uri(data, mime_type))
    return CompletionResult.failure("no_image_in_response")


def to_data_uri(data: bytes | str, mime_type: str = "image/png") -> str:
    """Encode image bytes (or an already base64 string) as a data URI."""
    if isinstance(data, bytes):
        encoded = base64.b64encode(data).decode("ascii")
    else:
        encoded = data
    return f"data:{mime_type};base64,{encoded}"


def _maybe_detail(exc: Exception) -> Optional[str]:
    settings = get_settings()
    if not settings.DEBUG:
        return None
    return f"{type(exc).__name__}: {exc}"
