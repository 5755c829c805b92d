"""
WebSocket connection hub.

Keeps the open WebSocket of every connection and the transport-level
group membership used for fan-out. Sends are best-effort: a failing
connection is logged and reported back, never raised to the caller.
"""

import asyncio
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from aistream.core.logging import get_logger
from aistream.schemas.group_chat import EventMessage

logger = get_logger(__name__)


class _Connection:
    __slots__ = ("websocket", "send_lock", "group_name")

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        # Frames for one socket must not interleave
        self.send_lock = asyncio.Lock()
        self.group_name: Optional[str] = None


class ConnectionHub:
    """
    Manages WebSocket connections and group fan-out.

    Stores connection_id -> WebSocket mapping and group -> connection ids.
    """

    def __init__(self):
        """Initialize connection hub."""
        self._connections: Dict[str, _Connection] = {}
        self._groups: Dict[str, Set[str]] = {}
        logger.info("[HUB] Initialized")

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def register(self, connection_id: str, websocket: WebSocket):
        """
        Register a newly accepted WebSocket.

        Args:
            connection_id: Unique connection identifier
            websocket: WebSocket connection object
        """
        self._connections[connection_id] = _Connection(websocket)
        logger.info(f"[HUB] ✅ Registered connection: {connection_id}")

    def unregister(self, connection_id: str):
        """
        Drop a connection and its transport group membership.

        Args:
            connection_id: Connection to remove
        """
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            logger.warning(f"[HUB] ⚠️ Connection not found: {connection_id}")
            return

        self._discard_from_group(connection_id, connection.group_name)
        logger.info(f"[HUB] 🗑️ Unregistered connection: {connection_id}")

    async def add_to_group(self, connection_id: str, group_name: str) -> bool:
        """
        Move a connection into a group for fan-out.

        Args:
            connection_id: Connection to move
            group_name: Target group

        Returns:
            False if the connection is not registered (already closed)
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.warning(f"[HUB] ⚠️ add_to_group for unknown connection: {connection_id}")
            return False

        if connection.group_name != group_name:
            self._discard_from_group(connection_id, connection.group_name)
        connection.group_name = group_name
        self._groups.setdefault(group_name, set()).add(connection_id)
        return True

    def _discard_from_group(self, connection_id: str, group_name: Optional[str]):
        if group_name is None:
            return
        members = self._groups.get(group_name)
        if members is not None:
            members.discard(connection_id)
            if not members:
                self._groups.pop(group_name, None)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_json(self, connection_id: str, payload: Dict[str, Any]) -> bool:
        """
        Send a JSON frame to a single connection.

        Returns:
            True if delivered, False if the connection is gone or failed
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            return False

        try:
            async with connection.send_lock:
                await connection.websocket.send_json(payload)
            return True
        except Exception as e:
            logger.error(f"[HUB] Failed to send to {connection_id}: {e}")
            return False

    async def send_to_group(self, group_name: str, event: str, *arguments: Any) -> List[str]:
        """
        Send an event to every member of a group.

        Returns:
            Connection ids the event could not be delivered to
        """
        return await self._fan_out(self.members(group_name), event, arguments)

    async def send_to_others_in_group(
        self,
        group_name: str,
        sender_id: str,
        event: str,
        *arguments: Any
    ) -> List[str]:
        """
        Send an event to every member of a group except the sender.

        Returns:
            Connection ids the event could not be delivered to
        """
        recipients = [cid for cid in self.members(group_name) if cid != sender_id]
        return await self._fan_out(recipients, event, arguments)

    async def _fan_out(self, recipients: List[str], event: str, arguments) -> List[str]:
        if not recipients:
            return []

        payload = EventMessage(target=event, arguments=list(arguments)).model_dump()
        results = await asyncio.gather(*(self.send_json(cid, payload) for cid in recipients))

        failed = [cid for cid, delivered in zip(recipients, results) if not delivered]
        if failed:
            logger.warning(f"[HUB] {event} not delivered to {len(failed)}/{len(recipients)} connections")
        return failed

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def members(self, group_name: str) -> List[str]:
        """Snapshot of the connection ids in a group."""
        return list(self._groups.get(group_name, ()))

    def get_active_connections(self) -> int:
        return len(self._connections)
