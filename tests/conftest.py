"""
Shared pytest configuration and fixtures.

Provides in-memory fakes for the two external collaborators of the group
chat: the transport that delivers events to connections, and the
completion provider that streams model output.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

import pytest

from aistream.schemas.group_chat import ChatMessage, CompletionUpdate
from aistream.services.group_chat import (
    GroupAccessor,
    GroupChatService,
    GroupHistoryStore,
)


class RecordingTransport:
    """Transport fake that records every call in order."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail_sends = False
        self.closed: set = set()

    async def add_to_group(self, connection_id: str, group_name: str) -> bool:
        self.calls.append(("add_to_group", connection_id, group_name))
        return connection_id not in self.closed

    async def send_to_group(self, group_name: str, event: str, *arguments: Any):
        self.calls.append(("group", group_name, event, arguments))
        if self.fail_sends:
            raise ConnectionError("socket closed")
        return []

    async def send_to_others_in_group(self, group_name: str, sender_id: str, event: str, *arguments: Any):
        self.calls.append(("others", group_name, sender_id, event, arguments))
        if self.fail_sends:
            raise ConnectionError("socket closed")
        return []

    def events(self, event: str) -> List[tuple]:
        """Calls that sent the given event name."""
        return [call for call in self.calls if call[0] in ("group", "others") and event in call]

    def update_texts(self) -> List[str]:
        """Accumulated text of every assistant update, in send order."""
        return [call[3][2] for call in self.calls if call[0] == "group"]


class ScriptedProvider:
    """
    Completion provider fake that yields a fixed list of chunks.

    Each chunk is a list of content deltas. If ``error`` is set it is
    raised after ``fail_after`` chunks have been yielded.
    """

    name = "scripted"

    def __init__(
        self,
        chunks: Sequence[Sequence[str]] = (),
        error: Optional[Exception] = None,
        fail_after: int = 0,
        on_chunk: Optional[Callable[[int], None]] = None,
    ):
        self.chunks = [list(chunk) for chunk in chunks]
        self.error = error
        self.fail_after = fail_after
        self.on_chunk = on_chunk
        self.contexts: List[Sequence[ChatMessage]] = []
        self.closed = False

    async def stream_completion(self, messages):
        self.contexts.append(messages)
        try:
            for index, chunk in enumerate(self.chunks):
                if self.error is not None and index == self.fail_after:
                    raise self.error
                if self.on_chunk is not None:
                    self.on_chunk(index)
                yield CompletionUpdate(content_deltas=chunk)
            if self.error is not None and self.fail_after >= len(self.chunks):
                raise self.error
        finally:
            self.closed = True


@pytest.fixture
def groups():
    return GroupAccessor()


@pytest.fixture
def history():
    return GroupHistoryStore()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def provider():
    return ScriptedProvider(chunks=[["4"], [" is"], [" the answer"]])


@pytest.fixture
def make_service(groups, history, transport):
    """Build a GroupChatService around the shared fakes with a given provider."""

    def _make(provider, trigger_replacement=None):
        return GroupChatService(
            groups=groups,
            history=history,
            transport=transport,
            provider=provider,
            trigger_marker="@gpt",
            trigger_replacement=trigger_replacement,
        )

    return _make


@pytest.fixture
def service(make_service, provider):
    return make_service(provider)
