"""
ChatGPT Streaming Clients.

Handles asynchronous streaming requests to OpenAI and Azure OpenAI chat
completions. Both variants share request construction and chunk
handling; they differ only in how the SDK client is created and which
model name is sent.
"""

import openai
import time
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from aistream.core.logging import get_logger
from aistream.schemas.group_chat import ChatMessage, CompletionUpdate

logger = get_logger(__name__)


class ChatGPTStreamingClient:
    """
    Async streaming client for chat completions.

    Features:
    - Real-time token streaming
    - First-chunk latency and throughput logging
    - Skips chunks without choices (Azure content-filter results)
    """

    name = "openai"

    def __init__(
        self,
        client: Any,
        model: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ):
        """
        Initialize streaming client.

        Args:
            client: openai.AsyncOpenAI compatible client
            model: Model (or Azure deployment) name
            max_tokens: Maximum tokens in response, provider default if None
            temperature: Sampling temperature, provider default if None
        """
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        logger.info(f"[STREAMING-CLIENT] Initialized {self.name} client with model: {model}")

    def build_request(self, messages: Sequence[ChatMessage]) -> Dict[str, Any]:
        """
        Build chat completion request arguments.

        Args:
            messages: Conversation transcript

        Returns:
            Keyword arguments for chat.completions.create
        """
        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_completion_message() for message in messages],
            "stream": True,
        }
        if self.max_tokens is not None:
            request["max_tokens"] = self.max_tokens
        if self.temperature is not None:
            request["temperature"] = self.temperature
        return request

    async def stream_completion(
        self,
        messages: Sequence[ChatMessage]
    ) -> AsyncIterator[CompletionUpdate]:
        """
        Stream a chat completion in real-time.

        Args:
            messages: Conversation transcript, oldest first

        Yields:
            CompletionUpdate for every chunk that carried content

        Example:
            async for update in client.stream_completion(messages):
                print(update.text, end='', flush=True)
        """

        start_time = time.time()
        first_chunk_time = None
        chunk_count = 0
        total_chars = 0

        try:
            logger.info(f"[STREAMING-CLIENT] 📤 Sending {len(messages)} messages to {self.name}...")

            response = await self.client.chat.completions.create(**self.build_request(messages))

            async for chunk in response:
                if not chunk.choices:
                    continue

                deltas: List[str] = []
                for choice in chunk.choices:
                    content = choice.delta.content if choice.delta else None
                    if content:
                        deltas.append(content)

                if not deltas:
                    continue

                chunk_count += 1
                total_chars += sum(len(delta) for delta in deltas)

                if first_chunk_time is None:
                    first_chunk_time = time.time()
                    logger.info(f"[STREAMING-CLIENT] ⚡ First chunk in {first_chunk_time - start_time:.2f}s")

                yield CompletionUpdate(content_deltas=deltas)

            total_time = time.time() - start_time
            chars_per_sec = total_chars / total_time if total_time > 0 else 0

            logger.info(
                f"[STREAMING-CLIENT] ✅ Complete: "
                f"{chunk_count} chunks, "
                f"{total_chars} chars, "
                f"{total_time:.2f}s, "
                f"{chars_per_sec:.0f} chars/sec"
            )

        except openai.APIConnectionError as e:
            logger.error(f"[STREAMING-CLIENT] ❌ Connection Error: {str(e)}")
            raise

        except openai.APIError as e:
            logger.error(f"[STREAMING-CLIENT] ❌ {self.name} API Error: {str(e)}")
            raise


class OpenAIStreamingClient(ChatGPTStreamingClient):
    """Streaming client for the OpenAI API or any compatible endpoint."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        endpoint: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ):
        if not api_key:
            raise RuntimeError("Missing OPENAI_API_KEY")

        super().__init__(
            openai.AsyncOpenAI(api_key=api_key, base_url=endpoint or None),
            model,
            max_tokens=max_tokens,
            temperature=temperature
        )


class AzureOpenAIStreamingClient(ChatGPTStreamingClient):
    """Streaming client for an Azure OpenAI deployment."""

    name = "azure-openai"

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        deployment_name: str,
        api_version: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ):
        if not endpoint:
            raise RuntimeError("Missing AZURE_OPENAI_ENDPOINT")
        if not api_key:
            raise RuntimeError("Missing AZURE_OPENAI_API_KEY")

        # Azure routes requests by deployment, so it is sent as the model
        super().__init__(
            openai.AsyncAzureOpenAI(
                azure_endpoint=endpoint,
                api_key=api_key,
                api_version=api_version
            ),
            deployment_name,
            max_tokens=max_tokens,
            temperature=temperature
        )
