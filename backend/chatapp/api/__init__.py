"""API routers."""

from chatapp.api import rpc

__all__ = [
    "rpc",
]
