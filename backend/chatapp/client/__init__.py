"""Python client for the chat RPC endpoint."""

from chatapp.client.local_cache import LocalSessionCache
from chatapp.client.rpc_client import ChatRpcClient, RpcCallError
from chatapp.client.session_state import ClientSessionState, Notification

__all__ = [
    "ChatRpcClient",
    "ClientSessionState",
    "LocalSessionCache",
    "Notification",
    "RpcCallError",
]
