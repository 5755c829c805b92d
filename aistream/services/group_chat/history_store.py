"""
Per-group conversation history.

Each group owns an append-only transcript guarded by its own lock;
appends to different groups never contend.
"""

import threading
from typing import Dict, List, Tuple

from aistream.core.logging import get_logger
from aistream.schemas.group_chat import ChatMessage, MessageRole

logger = get_logger(__name__)

ASSISTANT_NAME = "AI Assistant"


class _Transcript:
    """A group's messages plus the lock serializing appends to them."""

    __slots__ = ("lock", "messages")

    def __init__(self):
        self.lock = threading.Lock()
        self.messages: List[ChatMessage] = []


class GroupHistoryStore:
    """
    Stores the ordered transcript of every group.

    Transcripts are created on first use and live for the lifetime of the
    process.
    """

    def __init__(self):
        self._transcripts: Dict[str, _Transcript] = {}

    def _get_transcript(self, group_name: str) -> _Transcript:
        transcript = self._transcripts.get(group_name)
        if transcript is None:
            # setdefault is atomic, so concurrent first appends share one transcript
            transcript = self._transcripts.setdefault(group_name, _Transcript())
        return transcript

    def get_or_add_group_history(
        self,
        group_name: str,
        user_name: str,
        message: str
    ) -> Tuple[ChatMessage, ...]:
        """
        Append a user message and return the full transcript.

        Args:
            group_name: Group the message was sent to
            user_name: Author of the message
            message: Message content

        Returns:
            Immutable snapshot of the transcript including the new message
        """
        entry = ChatMessage(role=MessageRole.USER, author=user_name, content=message)
        transcript = self._get_transcript(group_name)

        with transcript.lock:
            transcript.messages.append(entry)
            snapshot = tuple(transcript.messages)

        logger.debug(f"[HISTORY] '{group_name}' +user ({user_name}), {len(snapshot)} messages")
        return snapshot

    def update_group_history_for_assistant(self, group_name: str, message: str):
        """
        Append the assistant's completed reply.

        Args:
            group_name: Group the reply belongs to
            message: Full reply content
        """
        entry = ChatMessage(role=MessageRole.ASSISTANT, author=ASSISTANT_NAME, content=message)
        transcript = self._get_transcript(group_name)

        with transcript.lock:
            transcript.messages.append(entry)
            count = len(transcript.messages)

        logger.debug(f"[HISTORY] '{group_name}' +assistant ({len(message)} chars), {count} messages")

    def get_history(self, group_name: str) -> Tuple[ChatMessage, ...]:
        """Snapshot of a group's transcript, empty if the group has none."""
        transcript = self._transcripts.get(group_name)
        if transcript is None:
            return ()
        with transcript.lock:
            return tuple(transcript.messages)

    def group_count(self) -> int:
        return len(self._transcripts)
