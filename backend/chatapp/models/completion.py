"""
Typed result of a completion-service call.

Providers never raise; they return a CompletionResult with either content
or an error code, so callers do not branch on library-specific errors.
"""

from typing import Optional

from pydantic import BaseModel


class CompletionResult(BaseModel):
    text: Optional[str] = None
    image_data_uri: Optional[str] = None
    error_code: Optional[str] = None
    error_detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_code is None and bool(self.text or self.image_data_uri)

    @classmethod
    def success_text(cls, text: str) -> "CompletionResult":
        return cls(text=text)

    @classmethod
    def success_image(cls, data_uri: str) -> "CompletionResult":
        return cls(image_data_uri=data_uri)

    @classmethod
    def failure(cls, error_code: str, error_detail: Optional[str] = None) -> "CompletionResult":
        return cls(error_code=error_code, error_detail=error_detail)
