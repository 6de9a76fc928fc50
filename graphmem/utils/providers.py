"""
Model collaborator contracts and provider factories.
"""

from typing import Any, Dict, List, Optional, Protocol

from .config import AppConfig, ConfigurationError
from .tool_calls import LLMResponse

SUPPORTED_PROVIDERS = ('bedrock', 'openai')


class ChatModel(Protocol):
    """Chat interface with optional function tools."""

    async def generate_response(self,
                                messages: List[Dict[str, str]],
                                tools: Optional[List[Dict[str, Any]]] = None) -> LLMResponse:
        ...


class EmbeddingModel(Protocol):
    """Fixed-length text embedding interface."""

    async def embed(self, text: str) -> List[float]:
        ...


def _normalize(provider: Optional[str]) -> str:
    return str(provider or '').strip().lower()


def create_llm(provider: str, config: AppConfig) -> ChatModel:
    """
    Build the chat model for a provider name.

    Raises:
        ConfigurationError: If the provider is not supported
    """
    normalized = _normalize(provider)
    if normalized == 'bedrock':
        from .bedrock_llm import BedrockLLM
        return BedrockLLM(config.bedrock_llm)
    if normalized == 'openai':
        from .openai_client import OpenAILLM
        return OpenAILLM(config.openai)
    raise ConfigurationError(f'Unsupported LLM provider: {provider!r}. Expected one of {", ".join(SUPPORTED_PROVIDERS)}.')


def create_embedder(provider: str, config: AppConfig) -> EmbeddingModel:
    """
    Build the embedding model for a provider name.

    Raises:
        ConfigurationError: If the provider is not supported
    """
    normalized = _normalize(provider)
    if normalized == 'bedrock':
        from .bedrock_embed import BedrockEmbed
        return BedrockEmbed(config.bedrock_embed)
    if normalized == 'openai':
        from .openai_client import OpenAIEmbed
        return OpenAIEmbed(config.openai)
    raise ConfigurationError(
        f'Unsupported embedder provider: {provider!r}. Expected one of {", ".join(SUPPORTED_PROVIDERS)}.')
