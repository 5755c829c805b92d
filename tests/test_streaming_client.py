"""
Tests for the chat completion streaming clients and provider selection.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from aistream.core.config import Settings
from aistream.schemas.group_chat import ChatMessage, MessageRole
from aistream.services.llm_streaming import (
    AzureOpenAIStreamingClient,
    ChatGPTStreamingClient,
    CompletionProvider,
    OpenAIStreamingClient,
    create_completion_provider,
)


def _chunk(*contents):
    """Build a chat.completion.chunk-like object."""
    return SimpleNamespace(
        choices=[SimpleNamespace(delta=SimpleNamespace(content=content)) for content in contents]
    )


class _Stream:
    def __init__(self, chunks, error=None):
        self._chunks = list(chunks)
        self._error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._chunks:
            return self._chunks.pop(0)
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration


def _sdk_client(stream):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=stream)
    return client


MESSAGES = (
    ChatMessage(role=MessageRole.USER, author="Alice Smith", content="hello"),
    ChatMessage(role=MessageRole.ASSISTANT, author="AI Assistant", content="hi"),
    ChatMessage(role=MessageRole.USER, author="Bob", content="what is 2+2"),
)


async def _collect(provider, messages=MESSAGES):
    return [update.content_deltas async for update in provider.stream_completion(messages)]


@pytest.mark.asyncio
async def test_stream_yields_content_deltas_in_order():
    stream = _Stream([_chunk("4"), _chunk(" is"), _chunk(" the answer")])
    client = ChatGPTStreamingClient(_sdk_client(stream), "gpt-4o-mini")

    assert await _collect(client) == [["4"], [" is"], [" the answer"]]


@pytest.mark.asyncio
async def test_stream_skips_chunks_without_content():
    preamble = SimpleNamespace(choices=[])  # Azure prompt filter results
    stream = _Stream([preamble, _chunk(None), _chunk("a", "b"), _chunk("")])
    client = ChatGPTStreamingClient(_sdk_client(stream), "gpt-4o-mini")

    assert await _collect(client) == [["a", "b"]]


@pytest.mark.asyncio
async def test_request_carries_history_and_stream_flag():
    sdk = _sdk_client(_Stream([]))
    client = ChatGPTStreamingClient(sdk, "gpt-4o-mini")

    await _collect(client)

    kwargs = sdk.chat.completions.create.await_args.kwargs
    assert kwargs == {
        "model": "gpt-4o-mini",
        "stream": True,
        "messages": [
            {"role": "user", "content": "hello", "name": "Alice_Smith"},
            {"role": "assistant", "content": "hi"},
            {"role": "user", "content": "what is 2+2", "name": "Bob"},
        ],
    }


def test_request_includes_optional_sampling_settings():
    client = ChatGPTStreamingClient(MagicMock(), "gpt-4o", max_tokens=256, temperature=0.2)

    request = client.build_request(MESSAGES)

    assert request["max_tokens"] == 256
    assert request["temperature"] == 0.2


@pytest.mark.asyncio
async def test_api_errors_propagate():
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    stream = _Stream([_chunk("partial")], error=error)
    client = ChatGPTStreamingClient(_sdk_client(stream), "gpt-4o-mini")

    received = []
    with pytest.raises(openai.APIConnectionError):
        async for update in client.stream_completion(MESSAGES):
            received.append(update.text)

    assert received == ["partial"]


def test_clients_satisfy_provider_protocol():
    client = ChatGPTStreamingClient(MagicMock(), "gpt-4o-mini")

    assert isinstance(client, CompletionProvider)


# =============================================================================
# Provider selection
# =============================================================================


def test_openai_selected_without_azure_deployment():
    settings = Settings(
        OPENAI_API_KEY="sk-test",
        OPENAI_MODEL="gpt-4o",
        AZURE_OPENAI_DEPLOYMENT_NAME=None,
    )

    provider = create_completion_provider(settings)

    assert isinstance(provider, OpenAIStreamingClient)
    assert provider.name == "openai"
    assert provider.model == "gpt-4o"


def test_azure_selected_when_deployment_configured():
    settings = Settings(
        AZURE_OPENAI_ENDPOINT="https://example.openai.azure.com",
        AZURE_OPENAI_API_KEY="azure-key",
        AZURE_OPENAI_DEPLOYMENT_NAME="chat-deployment",
        OPENAI_API_KEY="sk-ignored",
    )

    provider = create_completion_provider(settings)

    assert isinstance(provider, AzureOpenAIStreamingClient)
    assert provider.name == "azure-openai"
    assert provider.model == "chat-deployment"


def test_missing_credentials_fail_fast():
    settings = Settings(OPENAI_API_KEY=None, AZURE_OPENAI_DEPLOYMENT_NAME=None)

    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        create_completion_provider(settings)


def test_azure_requires_endpoint():
    settings = Settings(
        AZURE_OPENAI_ENDPOINT=None,
        AZURE_OPENAI_API_KEY="azure-key",
        AZURE_OPENAI_DEPLOYMENT_NAME="chat-deployment",
    )

    with pytest.raises(RuntimeError, match="AZURE_OPENAI_ENDPOINT"):
        create_completion_provider(settings)
