"""
Pydantic schemas for AIStream application.
"""

from .group_chat import (
    MessageRole,
    ChatMessage,
    CompletionUpdate,
    InvocationMessage,
    EventMessage,
    CompletionMessage,
    GroupChatStatus,
    participant_name,
)

__all__ = [
    "MessageRole",
    "ChatMessage",
    "CompletionUpdate",
    "InvocationMessage",
    "EventMessage",
    "CompletionMessage",
    "GroupChatStatus",
    "participant_name",
]
