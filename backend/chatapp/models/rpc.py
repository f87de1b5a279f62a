"""
Envelope models for the batched RPC endpoint.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class RpcCall(BaseModel):
    """A single procedure call."""

    id: Optional[Union[int, str]] = None
    method: str = Field(..., min_length=1, max_length=100)
    input: Optional[dict[str, Any]] = None


class RpcErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class RpcResponse(BaseModel):
    """Result or error for one call. Exactly one of the two is set."""

    id: Optional[Union[int, str]] = None
    result: Optional[Any] = None
    error: Optional[RpcErrorBody] = None
