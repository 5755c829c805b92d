"""
Completion provider protocol definition.

Defines the single capability the group chat needs from a language
model: stream a reply to a conversation.

Usage:
    from aistream.services.llm_streaming.base import CompletionProvider

    class MyProvider:
        name = "my-provider"

        async def stream_completion(self, messages):
            yield CompletionUpdate(content_deltas=["Hello"])
"""

from __future__ import annotations

from typing import AsyncIterator, Protocol, Sequence, runtime_checkable

from aistream.schemas.group_chat import ChatMessage, CompletionUpdate


@runtime_checkable
class CompletionProvider(Protocol):
    """
    Protocol for streaming completion providers.

    The returned iterator is lazy, finite and cannot be restarted. It
    yields one CompletionUpdate per provider chunk that carried content.
    """

    name: str

    def stream_completion(
        self,
        messages: Sequence[ChatMessage],
    ) -> AsyncIterator[CompletionUpdate]:
        """
        Stream a completion for the given conversation.

        Args:
            messages: Full conversation context, oldest first

        Yields:
            CompletionUpdate with the content fragments of each chunk
        """
        ...
