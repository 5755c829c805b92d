"""
LLM Streaming Service Module.

Provides streamed chat completions from OpenAI or Azure OpenAI. The
variant is chosen once at startup from configuration:

    provider = create_completion_provider(settings)

Azure OpenAI is used whenever AZURE_OPENAI_DEPLOYMENT_NAME is set,
otherwise the OpenAI API.
"""

from aistream.core.logging import get_logger

from .base import CompletionProvider
from .streaming_client import (
    ChatGPTStreamingClient,
    OpenAIStreamingClient,
    AzureOpenAIStreamingClient,
)

logger = get_logger(__name__)


def create_completion_provider(settings) -> CompletionProvider:
    """
    Create the completion provider configured for this deployment.

    Args:
        settings: Application settings

    Returns:
        Configured provider instance

    Raises:
        RuntimeError: If credentials for the selected provider are missing
    """
    if settings.use_azure_openai:
        logger.info(
            f"[LLM-STREAMING] Using Azure OpenAI deployment "
            f"'{settings.AZURE_OPENAI_DEPLOYMENT_NAME}'"
            + (f" (model {settings.AZURE_OPENAI_MODEL})" if settings.AZURE_OPENAI_MODEL else "")
        )
        return AzureOpenAIStreamingClient(
            endpoint=settings.AZURE_OPENAI_ENDPOINT,
            api_key=settings.AZURE_OPENAI_API_KEY,
            deployment_name=settings.AZURE_OPENAI_DEPLOYMENT_NAME,
            api_version=settings.AZURE_OPENAI_API_VERSION,
            max_tokens=settings.COMPLETION_MAX_TOKENS,
            temperature=settings.COMPLETION_TEMPERATURE,
        )

    logger.info(f"[LLM-STREAMING] Using OpenAI model '{settings.OPENAI_MODEL}'")
    return OpenAIStreamingClient(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        endpoint=settings.OPENAI_ENDPOINT,
        max_tokens=settings.COMPLETION_MAX_TOKENS,
        temperature=settings.COMPLETION_TEMPERATURE,
    )


__all__ = [
    "CompletionProvider",
    "ChatGPTStreamingClient",
    "OpenAIStreamingClient",
    "AzureOpenAIStreamingClient",
    "create_completion_provider",
]
