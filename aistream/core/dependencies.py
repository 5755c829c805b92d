"""
FastAPI dependencies for AIStream application.
Builds the process-wide group chat state and exposes it to endpoints.
"""

from typing import Optional

from fastapi import HTTPException, Request, WebSocket, status

from aistream.core.logging import get_logger
from aistream.services.group_chat import GroupAccessor, GroupChatService, GroupHistoryStore
from aistream.services.llm_streaming import CompletionProvider, create_completion_provider
from aistream.websockets.hub import ConnectionHub

# Initialize logger
logger = get_logger(__name__)


def build_group_chat(settings, provider: Optional[CompletionProvider] = None) -> GroupChatService:
    """
    Wire the group chat service for this process.

    Args:
        settings: Application settings
        provider: Completion provider, created from settings if None

    Returns:
        GroupChatService backed by a fresh ConnectionHub
    """
    if provider is None:
        provider = create_completion_provider(settings)

    service = GroupChatService(
        groups=GroupAccessor(),
        history=GroupHistoryStore(),
        transport=ConnectionHub(),
        provider=provider,
        trigger_marker=settings.TRIGGER_MARKER,
        trigger_replacement=settings.TRIGGER_REPLACEMENT,
    )
    logger.info(
        f"✅ Group chat ready (provider: {provider.name}, trigger: '{settings.TRIGGER_MARKER}')"
    )
    return service


def _service_from_state(state) -> Optional[GroupChatService]:
    return getattr(state, "group_chat_service", None)


def get_group_chat_service(request: Request) -> GroupChatService:
    """
    Get the group chat service for HTTP endpoints

    Raises:
        HTTPException: If the application has not finished starting
    """
    service = _service_from_state(request.app.state)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Group chat is not initialized"
        )
    return service


def get_group_chat_service_ws(websocket: WebSocket) -> Optional[GroupChatService]:
    """Get the group chat service for WebSocket endpoints, None if not started."""
    return _service_from_state(websocket.app.state)
