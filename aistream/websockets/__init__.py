"""
WebSocket transport for the group chat.
"""

from .hub import ConnectionHub

__all__ = ["ConnectionHub"]
