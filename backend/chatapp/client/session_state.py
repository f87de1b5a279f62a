"""
Client-side session state.

Holds the session list, the active session's messages and the composer
draft. The server is the source of truth: every mutation is followed by a
refetch, and the only local-only entry is the pending user message shown
while a send is in flight.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from chatapp.client.local_cache import LocalSessionCache
from chatapp.client.rpc_client import ChatRpcClient, RpcCallError
from chatapp.core.logger import logger
from chatapp.models.chat_session import ChatMessage, ChatSession
from chatapp.models.enums import MessageRole, MessageType
from chatapp.utils.datetime_utils import now_utc

PENDING_ID_PREFIX = "pending-"


@dataclass(frozen=True)
class Notification:
    """Transient user-facing error."""

    code: str
    message: str


class ClientSessionState:
    def __init__(self, client: ChatRpcClient, cache: LocalSessionCache):
        self._client = client
        self._cache = cache
        self.sessions: list[ChatSession] = []
        self.messages: list[ChatMessage] = []
        self.active_session_id: Optional[str] = None
        self.draft: str = ""
        self.notifications: list[Notification] = []

    @property
    def active_session(self) -> Optional[ChatSession]:
        return next((s for s in self.sessions if s.id == self.active_session_id), None)

    @property
    def has_pending_message(self) -> bool:
        return any(m.id.startswith(PENDING_ID_PREFIX) for m in self.messages)

    def pop_notifications(self) -> list[Notification]:
        notifications, self.notifications = self.notifications, []
        return notifications

    def _notify(self, error: RpcCallError) -> None:
        logger.info(f"Client operation failed: {error.code} {error.message}")
        self.notifications.append(Notification(error.code, error.message))

    # ===========================================
    # Loading and selection
    # ===========================================

    async def load(self) -> bool:
        """
        Restore the active session.

        The cached id is kept only if the server still lists it; otherwise
        the newest session is used, and a new one is created when the user
        has none.
        """
        hint = self._cache.load_active_session_id()
        try:
            await self._refresh_sessions()
            if hint and any(s.id == hint for s in self.sessions):
                chosen = hint
            elif self.sessions:
                chosen = self.sessions[0].id
            else:
                created = await self._client.create_session()
                await self._refresh_sessions()
                chosen = created.id
            await self._activate(chosen)
        except RpcCallError as e:
            self._notify(e)
            return False
        return True

    async def select_session(self, session_id: str) -> bool:
        try:
            await self._activate(session_id)
        except RpcCallError as e:
            self._notify(e)
            return False
        return True

    async def _activate(self, session_id: Optional[str]) -> None:
        self.active_session_id = session_id
        self.messages = []
        self._cache.save_active_session_id(session_id)
        if session_id:
            await self._refresh_messages()

    async def _refresh_sessions(self) -> None:
        self.sessions = await self._client.list_sessions()

    async def _refresh_messages(self) -> None:
        if self.active_session_id:
            self.messages = await self._client.list_messages(self.active_session_id)

    async def _refetch_after(self, session_id: Optional[str]) -> None:
        await self._refresh_sessions()
        if session_id and session_id == self.active_session_id:
            await self._refresh_messages()

    # ===========================================
    # Session mutations
    # ===========================================

    async def create_session(self, title: Optional[str] = None) -> Optional[ChatSession]:
        """Create a session and make it active."""
        try:
            created = await self._client.create_session(title)
            await self._refresh_sessions()
            await self._activate(created.id)
        except RpcCallError as e:
            self._notify(e)
            return None
        return created

    async def rename_session(self, session_id: str, new_title: str) -> bool:
        try:
            await self._client.rename_session(session_id, new_title)
            await self._refetch_after(session_id)
        except RpcCallError as e:
            self._notify(e)
            return False
        return True

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session. Deleting the active one moves to the newest remaining."""
        try:
            await self._client.delete_session(session_id)
            await self._refresh_sessions()
            if session_id == self.active_session_id:
                if self.sessions:
                    await self._activate(self.sessions[0].id)
                else:
                    created = await self._client.create_session()
                    await self._refresh_sessions()
                    await self._activate(created.id)
        except RpcCallError as e:
            self._notify(e)
            return False
        return True

    # ===========================================
    # Sending
    # ===========================================

    async def send_text(self, prompt: str) -> bool:
        return await self._send(prompt, MessageType.TEXT)

    async def generate_image(self, prompt: str) -> bool:
        return await self._send(prompt, MessageType.IMAGE_PROMPT)

    async def _send(self, prompt: str, message_type: MessageType) -> bool:
        session_id = self.active_session_id
        if not session_id or not prompt.strip():
            return False

        pending = ChatMessage(
            id=f"{PENDING_ID_PREFIX}{uuid4()}",
            session_id=session_id,
            owner_id="",
            role=MessageRole.USER,
            type=message_type,
            content=prompt,
            created_at=now_utc(),
        )
        self.messages.append(pending)
        self.draft = ""

        try:
            if message_type == MessageType.IMAGE_PROMPT:
                await self._client.generate_image(session_id, prompt)
            else:
                await self._client.send_text_message(session_id, prompt)
        except RpcCallError as e:
            self.messages = [m for m in self.messages if m.id != pending.id]
            self.draft = prompt
            self._notify(e)
            return False

        try:
            await self._refetch_after(session_id)
        except RpcCallError as e:
            # Sent, but the view is stale until the next refetch
            self._notify(e)
        return True
