"""
HTTP client for the batched RPC endpoint.
"""

from typing import Any, Optional

import httpx

from chatapp.models.chat_session import ChatMessage, ChatSession


class RpcCallError(Exception):
    """Error envelope returned for a procedure call."""

    def __init__(self, code: str, message: str, details: Optional[Any] = None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"{code}: {message}")


class ChatRpcClient:
    """
    Typed wrapper over POST /api/rpc.

    Pass ``transport`` to talk to an in-process app (httpx.ASGITransport).
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 60.0,
        path: str = "/api/rpc",
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            transport=transport,
            timeout=timeout,
        )
        self._path = path
        self._next_id = 0

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ChatRpcClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _call_body(self, method: str, input: Optional[dict[str, Any]]) -> dict[str, Any]:
        self._next_id += 1
        body: dict[str, Any] = {"id": self._next_id, "method": method}
        if input is not None:
            body["input"] = input
        return body

    @staticmethod
    def _unwrap(entry: dict[str, Any]) -> Any:
        error = entry.get("error")
        if error:
            raise RpcCallError(
                error.get("code", "INTERNAL_ERROR"),
                error.get("message", ""),
                error.get("details"),
            )
        return entry.get("result")

    async def call(self, method: str, input: Optional[dict[str, Any]] = None) -> Any:
        """Run one procedure and return its result, or raise RpcCallError."""
        try:
            resp = await self._client.post(self._path, json=self._call_body(method, input))
            entry = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RpcCallError("NETWORK_ERROR", str(e)) from e
        if not isinstance(entry, dict):
            raise RpcCallError("INTERNAL_ERROR", "Unexpected response shape")
        return self._unwrap(entry)

    async def batch(self, calls: list[tuple[str, Optional[dict[str, Any]]]]) -> list[Any]:
        """
        Run several procedures in one request.

        Returns one item per call, in order: the result, or an RpcCallError
        instance for calls that failed.
        """
        bodies = [self._call_body(method, input) for method, input in calls]
        try:
            resp = await self._client.post(self._path, json=bodies)
            entries = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RpcCallError("NETWORK_ERROR", str(e)) from e
        if not isinstance(entries, list):
            # Whole batch rejected
            self._unwrap(entries if isinstance(entries, dict) else {})
            raise RpcCallError("INTERNAL_ERROR", "Unexpected response shape")

        results: list[Any] = []
        for entry in entries:
            try:
                results.append(self._unwrap(entry))
            except RpcCallError as e:
                results.append(e)
        return results

    # ===========================================
    # Procedures
    # ===========================================

    async def list_sessions(self) -> list[ChatSession]:
        rows = await self.call("chat.listSessions")
        return [ChatSession.model_validate(row) for row in rows]

    async def create_session(self, title: Optional[str] = None) -> ChatSession:
        row = await self.call("chat.createSession", {"title": title} if title else {})
        return ChatSession.model_validate(row)

    async def rename_session(self, session_id: str, new_title: str) -> ChatSession:
        row = await self.call(
            "chat.renameSession", {"sessionId": session_id, "newTitle": new_title}
        )
        return ChatSession.model_validate(row)

    async def delete_session(self, session_id: str) -> bool:
        result = await self.call("chat.deleteSession", {"sessionId": session_id})
        return bool(result and result.get("success"))

    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        rows = await self.call("chat.listMessages", {"sessionId": session_id})
        return [ChatMessage.model_validate(row) for row in rows]

    async def send_text_message(self, session_id: str, prompt: str) -> dict[str, Any]:
        return await self.call("chat.sendTextMessage", {"sessionId": session_id, "prompt": prompt})

    async def generate_image(self, session_id: str, prompt: str) -> dict[str, Any]:
        return await self.call("chat.generateImage", {"sessionId": session_id, "prompt": prompt})
