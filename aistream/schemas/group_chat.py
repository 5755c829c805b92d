"""
Group chat schemas for AIStream application.
Defines transcript messages, completion updates and the WebSocket frames
exchanged with browser clients.
"""

import enum
import re
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

# Chat completions only accept participant names matching this pattern
_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")
MAX_PARTICIPANT_NAME_LENGTH = 64


class MessageRole(str, enum.Enum):
    """Transcript message roles"""
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Single immutable entry of a group transcript"""
    role: MessageRole = Field(..., description="Message role: user/assistant")
    author: str = Field(..., description="Display name of the author")
    content: str = Field(..., description="Message content")

    class Config:
        frozen = True

    def to_completion_message(self) -> Dict[str, str]:
        """
        Convert to the chat-completions message format.

        User authors are passed as the participant name so the model can
        tell group members apart.
        """
        message = {"role": self.role.value, "content": self.content}
        if self.role == MessageRole.USER:
            name = participant_name(self.author)
            if name:
                message["name"] = name
        return message


def participant_name(author: str) -> str:
    """Sanitise a display name into a valid chat-completions participant name."""
    return _INVALID_NAME_CHARS.sub("_", author.strip())[:MAX_PARTICIPANT_NAME_LENGTH]


class CompletionUpdate(BaseModel):
    """One increment of a streamed completion"""
    content_deltas: List[str] = Field(default_factory=list, description="Ordered text fragments")

    @property
    def text(self) -> str:
        return "".join(self.content_deltas)


# ============================================================================
# WEBSOCKET FRAMES
# ============================================================================

class InvocationMessage(BaseModel):
    """Client -> server hub method invocation"""
    type: str = Field("invocation", description="Frame type")
    target: str = Field(..., description="Hub method: JoinGroup or Chat")
    arguments: List[Any] = Field(default_factory=list, description="Positional arguments")
    invocationId: Optional[str] = Field(None, description="Echoed back in the completion frame")


class EventMessage(BaseModel):
    """Server -> client event broadcast"""
    type: str = "event"
    target: str
    arguments: List[Any]


class CompletionMessage(BaseModel):
    """Server -> client result of an invocation"""
    type: str = "completion"
    invocationId: Optional[str] = None
    error: Optional[str] = None


class GroupChatStatus(BaseModel):
    """Schema for the group chat status endpoint"""
    status: str = Field(..., description="Service state")
    provider: str = Field(..., description="Completion provider wired in at startup")
    trigger_marker: str = Field(..., description="Substring that asks the assistant to answer")
    active_connections: int = Field(..., description="Open WebSocket connections")
    groups: int = Field(..., description="Groups with a transcript")
