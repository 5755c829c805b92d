"""
Group chat error kinds.

All of them are local to the invocation that raised them; none affect
other connections or groups.
"""


class GroupChatError(Exception):
    """Base class for errors reported back to the invoking connection."""

    pass


class NotInGroupError(GroupChatError):
    """Raised when a chat message arrives from a connection with no group."""

    def __init__(self, connection_id: str):
        self.connection_id = connection_id
        super().__init__("Not in a group.")


class CompletionStreamError(GroupChatError):
    """
    Raised when the completion provider fails mid-stream.

    The transcript is left without an assistant message for the failed
    reply. Updates already broadcast for the correlation id stay visible
    to clients as a never-finalized message.
    """

    def __init__(self, group: str, correlation_id: str):
        self.group = group
        self.correlation_id = correlation_id
        super().__init__("The assistant failed to complete its reply.")
