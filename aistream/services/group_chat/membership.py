"""
Group membership registry.

Maps each live connection to the single group it has joined. Every
operation is one dictionary access, so lookups never wait on joins or
leaves of other connections.
"""

from typing import Dict, Optional

from aistream.core.logging import get_logger

logger = get_logger(__name__)


class GroupAccessor:
    """
    Tracks which group each connection belongs to.

    A connection belongs to at most one group: joining a new group
    replaces the previous association.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._groups: Dict[str, str] = {}
        logger.info("[GROUP-ACCESSOR] Initialized")

    def join(self, connection_id: str, group_name: str):
        """
        Associate a connection with a group.

        Args:
            connection_id: Connection identifier
            group_name: Group to join
        """
        previous = self._groups.get(connection_id)
        self._groups[connection_id] = group_name

        if previous is not None and previous != group_name:
            logger.info(
                f"[GROUP-ACCESSOR] Connection {connection_id} moved "
                f"from '{previous}' to '{group_name}'"
            )
        else:
            logger.info(f"[GROUP-ACCESSOR] Connection {connection_id} joined '{group_name}'")

    def leave(self, connection_id: str):
        """
        Remove any group association for a connection.

        Args:
            connection_id: Connection identifier
        """
        group_name = self._groups.pop(connection_id, None)
        if group_name is not None:
            logger.info(f"[GROUP-ACCESSOR] Connection {connection_id} left '{group_name}'")

    def try_get_group(self, connection_id: str) -> Optional[str]:
        """
        Look up the group of a connection.

        Args:
            connection_id: Connection identifier

        Returns:
            Group name or None if the connection has not joined one
        """
        return self._groups.get(connection_id)

    def __len__(self) -> int:
        return len(self._groups)
