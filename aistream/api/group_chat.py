"""
Group chat API endpoints.

WebSocket hub at /groupChat: clients invoke JoinGroup and Chat and
receive NewMessage / newMessageWithId events for their group.
"""

import asyncio
import json
import uuid
from typing import List, Optional, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from aistream.core.config import settings
from aistream.core.dependencies import get_group_chat_service, get_group_chat_service_ws
from aistream.core.logging import get_logger
from aistream.schemas.group_chat import CompletionMessage, GroupChatStatus, InvocationMessage
from aistream.services.group_chat import GroupChatError, GroupChatService

logger = get_logger(__name__)
router = APIRouter()

# Invocations keep running after their socket closes; hold references until done
_pending_invocations: Set[asyncio.Task] = set()


# ============================================================================
# WEBSOCKET HUB
# ============================================================================

@router.websocket("/groupChat")
async def group_chat_endpoint(websocket: WebSocket):
    """
    Group chat WebSocket hub.

    Frames from the client:
        {"type": "invocation", "target": "JoinGroup", "arguments": ["room1"], "invocationId": "1"}
        {"type": "invocation", "target": "Chat", "arguments": ["Alice", "@gpt hi"], "invocationId": "2"}
        {"type": "ping"}

    Every invocation is answered with a completion frame once it finishes;
    a long assistant reply does not hold up later frames.
    """
    service = get_group_chat_service_ws(websocket)
    if service is None:
        logger.error("[GROUP-CHAT-WS] Service not initialized, rejecting connection")
        await websocket.close(code=1013)
        return

    hub = service.transport
    connection_id = uuid.uuid4().hex

    await websocket.accept()
    hub.register(connection_id, websocket)
    logger.info(f"[GROUP-CHAT-WS] New connection {connection_id}")

    await hub.send_json(connection_id, {"type": "connected", "connectionId": connection_id})

    try:
        while True:
            try:
                message = await websocket.receive()
            except WebSocketDisconnect:
                break

            if message.get("type") == "websocket.disconnect":
                break

            text = message.get("text")
            if text is None:
                await _send_error(hub, connection_id, "Binary frames are not supported")
                continue

            if len(text) > settings.WS_MAX_MSG_SIZE:
                await _send_error(hub, connection_id, "Frame too large")
                continue

            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                await _send_error(hub, connection_id, "Invalid JSON")
                continue

            if not isinstance(data, dict):
                await _send_error(hub, connection_id, "Frame must be a JSON object")
                continue

            if data.get("type") == "ping":
                await hub.send_json(connection_id, {"type": "pong"})
                continue

            try:
                invocation = InvocationMessage(**data)
            except ValidationError as e:
                await _send_error(hub, connection_id, f"Invalid invocation: {e.errors()[0]['msg']}")
                continue

            task = asyncio.create_task(_invoke(service, connection_id, invocation))
            _pending_invocations.add(task)
            task.add_done_callback(_pending_invocations.discard)

    except Exception as e:
        logger.error(f"[GROUP-CHAT-WS] Error on connection {connection_id}: {str(e)}", exc_info=True)
    finally:
        hub.unregister(connection_id)
        service.on_disconnected(connection_id)
        logger.info(f"[GROUP-CHAT-WS] Connection {connection_id} closed")


def _string_arguments(invocation: InvocationMessage, count: int) -> Optional[List[str]]:
    arguments = invocation.arguments
    if len(arguments) != count or not all(isinstance(arg, str) for arg in arguments):
        return None
    return arguments


async def _invoke(service: GroupChatService, connection_id: str, invocation: InvocationMessage):
    """Run one hub method and report its outcome to the caller."""
    error = None

    try:
        if invocation.target == "JoinGroup":
            arguments = _string_arguments(invocation, 1)
            if arguments is None:
                error = "JoinGroup expects one argument: groupName"
            else:
                await service.join_group(connection_id, arguments[0])

        elif invocation.target == "Chat":
            arguments = _string_arguments(invocation, 2)
            if arguments is None:
                error = "Chat expects two arguments: userName, message"
            else:
                await service.chat(connection_id, arguments[0], arguments[1])

        else:
            error = f"Unknown hub method '{invocation.target}'"

    except GroupChatError as e:
        error = str(e)

    except Exception as e:
        logger.error(
            f"[GROUP-CHAT-WS] Unhandled error in {invocation.target} "
            f"from {connection_id}: {str(e)}",
            exc_info=True
        )
        error = f"An unexpected error occurred invoking '{invocation.target}' on the server."

    if invocation.invocationId is not None:
        await service.transport.send_json(
            connection_id,
            CompletionMessage(invocationId=invocation.invocationId, error=error).model_dump()
        )
    elif error is not None:
        await _send_error(service.transport, connection_id, error)


async def _send_error(hub, connection_id: str, error: str):
    await hub.send_json(connection_id, {"type": "error", "error": error})


# ============================================================================
# STATUS
# ============================================================================

@router.get("/api/group-chat/status", response_model=GroupChatStatus)
async def get_group_chat_status(service: GroupChatService = Depends(get_group_chat_service)):
    """
    Get group chat service status.

    Returns:
        Provider in use, trigger marker and live counts
    """
    return GroupChatStatus(
        status="operational",
        provider=service.provider.name,
        trigger_marker=service.trigger_marker,
        active_connections=service.transport.get_active_connections(),
        groups=service.history.group_count(),
    )
