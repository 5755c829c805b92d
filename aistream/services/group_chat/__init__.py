"""
Group Chat Service Module.

Group membership, per-group conversation history and the streamed
assistant replies built on top of them.
"""

from .exceptions import GroupChatError, NotInGroupError, CompletionStreamError
from .membership import GroupAccessor
from .history_store import GroupHistoryStore, ASSISTANT_NAME
from .streaming_engine import (
    GroupChatService,
    GroupTransport,
    StreamingSession,
    FLUSH_THRESHOLD,
    NEW_MESSAGE_EVENT,
    MESSAGE_UPDATE_EVENT,
)

__all__ = [
    "GroupChatError",
    "NotInGroupError",
    "CompletionStreamError",
    "GroupAccessor",
    "GroupHistoryStore",
    "ASSISTANT_NAME",
    "GroupChatService",
    "GroupTransport",
    "StreamingSession",
    "FLUSH_THRESHOLD",
    "NEW_MESSAGE_EVENT",
    "MESSAGE_UPDATE_EVENT",
]
