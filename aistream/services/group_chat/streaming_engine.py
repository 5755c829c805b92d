"""
Group chat service with streamed assistant replies.

Relays chat messages within a group and, when a message contains the
trigger marker, streams the model's reply back to the whole group as a
series of growing updates sharing one correlation id.
"""

import uuid
from contextlib import aclosing
from typing import Any, Optional, Protocol

from aistream.core.logging import get_logger, get_context_logger
from aistream.services.group_chat.exceptions import CompletionStreamError, NotInGroupError
from aistream.services.group_chat.history_store import ASSISTANT_NAME, GroupHistoryStore
from aistream.services.group_chat.membership import GroupAccessor
from aistream.services.llm_streaming.base import CompletionProvider

logger = get_logger(__name__)

# Client events
NEW_MESSAGE_EVENT = "NewMessage"
MESSAGE_UPDATE_EVENT = "newMessageWithId"

# Unflushed characters needed before an intermediate update is broadcast
FLUSH_THRESHOLD = 20


class GroupTransport(Protocol):
    """Delivery side of the real-time connection layer."""

    async def add_to_group(self, connection_id: str, group_name: str) -> bool: ...

    async def send_to_group(self, group_name: str, event: str, *arguments: Any) -> Any: ...

    async def send_to_others_in_group(
        self, group_name: str, sender_id: str, event: str, *arguments: Any
    ) -> Any: ...


class StreamingSession:
    """Accumulates one streamed reply and tracks how much was broadcast."""

    def __init__(self, group_name: str, correlation_id: Optional[str] = None):
        self.group_name = group_name
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self._parts = []
        self._length = 0
        self.last_flushed_length = 0
        self.flush_count = 0

    def append(self, text: str):
        if text:
            self._parts.append(text)
            self._length += len(text)

    @property
    def length(self) -> int:
        return self._length

    @property
    def content(self) -> str:
        return "".join(self._parts)

    def should_flush(self) -> bool:
        return self._length - self.last_flushed_length > FLUSH_THRESHOLD

    def mark_flushed(self):
        self.last_flushed_length = self._length
        self.flush_count += 1


class GroupChatService:
    """
    Handles the inbound hub methods of the group chat.

    Shares one membership registry and one history store across all
    connections; completions for the same group are not serialized.
    """

    def __init__(
        self,
        groups: GroupAccessor,
        history: GroupHistoryStore,
        transport: GroupTransport,
        provider: CompletionProvider,
        trigger_marker: str = "@gpt",
        trigger_replacement: Optional[str] = None
    ):
        self.groups = groups
        self.history = history
        self.transport = transport
        self.provider = provider
        self.trigger_marker = trigger_marker
        self.trigger_replacement = trigger_replacement
        self.active_sessions = 0

    # ------------------------------------------------------------------
    # Hub methods
    # ------------------------------------------------------------------

    async def join_group(self, connection_id: str, group_name: str):
        """Add the connection to a group, leaving any group it was in."""
        # A join that lands after the disconnect cleanup must not re-create the entry
        if not await self.transport.add_to_group(connection_id, group_name):
            logger.info(f"[GROUP-CHAT] Ignoring join of '{group_name}' from closed connection {connection_id}")
            return
        self.groups.join(connection_id, group_name)

    def on_disconnected(self, connection_id: str):
        """Forget a closed connection. In-flight replies keep streaming."""
        self.groups.leave(connection_id)

    async def chat(self, connection_id: str, user_name: str, message: str):
        """
        Handle a chat message from a group member.

        Args:
            connection_id: Sending connection
            user_name: Display name chosen by the sender
            message: Raw message text

        Raises:
            NotInGroupError: If the connection has not joined a group
            CompletionStreamError: If the completion provider fails
        """
        group_name = self.groups.try_get_group(connection_id)
        if group_name is None:
            logger.warning(f"[GROUP-CHAT] Chat from connection {connection_id} outside any group")
            raise NotInGroupError(connection_id)

        if not self.is_triggered(message):
            self.history.get_or_add_group_history(group_name, user_name, message)
            await self._relay(group_name, connection_id, user_name, message)
            return

        await self._answer(group_name, connection_id, user_name, message)

    # ------------------------------------------------------------------
    # Trigger handling
    # ------------------------------------------------------------------

    def is_triggered(self, message: str) -> bool:
        return self.trigger_marker in message

    def prompt_text(self, message: str) -> str:
        """User content sent to the model: marker stripped or substituted."""
        return message.replace(self.trigger_marker, self.trigger_replacement or "").strip()

    async def _answer(self, group_name: str, connection_id: str, user_name: str, message: str):
        session = StreamingSession(group_name)
        log = get_context_logger(__name__, {
            "group": group_name,
            "correlation_id": session.correlation_id,
        })

        context = self.history.get_or_add_group_history(
            group_name, user_name, self.prompt_text(message)
        )

        await self._relay(group_name, connection_id, user_name, message)

        log.info(
            f"[GROUP-CHAT] 🚀 {user_name} asked the assistant in '{group_name}' "
            f"({len(context)} messages of context, reply {session.correlation_id})"
        )

        self.active_sessions += 1
        try:
            async with aclosing(self.provider.stream_completion(context)) as updates:
                async for update in updates:
                    for delta in update.content_deltas:
                        session.append(delta)

                    if session.should_flush():
                        await self._send_update(session)
                        session.mark_flushed()
        except Exception as e:
            log.error(
                f"[GROUP-CHAT] ❌ Completion failed in '{group_name}' after "
                f"{session.length} chars: {str(e)}",
                exc_info=True
            )
            raise CompletionStreamError(group_name, session.correlation_id) from e
        finally:
            self.active_sessions -= 1

        content = session.content
        self.history.update_group_history_for_assistant(group_name, content)

        # Always repeat the full reply so the last frame a client sees is complete
        await self._send_update(session, content)

        log.info(
            f"[GROUP-CHAT] ✅ Reply {session.correlation_id} complete: "
            f"{len(content)} chars, {session.flush_count} intermediate updates"
        )

    # ------------------------------------------------------------------
    # Broadcasts
    # ------------------------------------------------------------------

    async def _relay(self, group_name: str, sender_id: str, user_name: str, message: str):
        try:
            await self.transport.send_to_others_in_group(
                group_name, sender_id, NEW_MESSAGE_EVENT, user_name, message
            )
        except Exception as e:
            logger.error(f"[GROUP-CHAT] Relay to '{group_name}' failed: {str(e)}")

    async def _send_update(self, session: StreamingSession, content: Optional[str] = None):
        try:
            await self.transport.send_to_group(
                session.group_name,
                MESSAGE_UPDATE_EVENT,
                ASSISTANT_NAME,
                session.correlation_id,
                session.content if content is None else content
            )
        except Exception as e:
            logger.error(
                f"[GROUP-CHAT] Update {session.correlation_id} to "
                f"'{session.group_name}' failed: {str(e)}"
            )
