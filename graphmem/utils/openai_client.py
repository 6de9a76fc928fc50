"""
OpenAI chat (with tool calling) and embedding clients.
"""

from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from .config import OpenAIConfig
from .logging_config import get_logger
from .tool_calls import LLMResponse, ToolCall

logger = get_logger(__name__)


class OpenAIClientError(Exception):
    """Custom exception for OpenAI client errors."""
    pass


class OpenAILLM:
    """Async OpenAI chat completions client returning provider-neutral responses."""

    def __init__(self, config: OpenAIConfig):
        """
        Initialize the OpenAI chat client.

        Args:
            config: OpenAIConfig with credentials and model selection
        """
        self.config = config
        self.model = config.model
        self.async_client = AsyncOpenAI(api_key=config.api_key, base_url=config.base_url)

        logger.info(f'Initialized OpenAI LLM client with model: {self.model}')

    async def generate_response(self,
                                messages: List[Dict[str, str]],
                                tools: Optional[List[Dict[str, Any]]] = None,
                                max_tokens: Optional[int] = None,
                                temperature: Optional[float] = None) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: Chat messages as {'role', 'content'} dicts
            tools: OpenAI function tool definitions
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            LLMResponse with text content and tool calls

        Raises:
            OpenAIClientError: If the request fails
        """
        kwargs = {
            'model': self.model,
            'messages': messages,
            'temperature': temperature if temperature is not None else self.config.temperature,
            'max_tokens': max_tokens or self.config.max_tokens,
        }
        if tools:
            kwargs['tools'] = tools
            kwargs['tool_choice'] = 'auto'

        if 'gpt-5' in self.model:
            kwargs.pop('temperature')

        try:
            response = await self.async_client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            logger.error(f'OpenAI chat completion failed: {e}')
            raise OpenAIClientError(f'OpenAI chat completion failed: {e}') from e

        message = response.choices[0].message
        tool_calls = [
            ToolCall(name=call.function.name, arguments=call.function.arguments or '') for call in (message.tool_calls or [])
        ]
        return LLMResponse(content=message.content or '', tool_calls=tool_calls)

    async def health_check(self) -> bool:
        try:
            response = await self.generate_response([{'role': 'user', 'content': "Respond with just 'OK'."}], max_tokens=10)
            return len(response.content.strip()) > 0
        except Exception as e:
            logger.error(f'OpenAI LLM health check failed: {e}')
            return False


class OpenAIEmbed:
    """Async OpenAI embeddings client."""

    def __init__(self, config: OpenAIConfig):
        self.config = config
        self.model = config.embedding_model
        self.async_client = AsyncOpenAI(api_key=config.api_key, base_url=config.base_url)

        logger.info(f'Initialized OpenAI Embed client with model: {self.model}')

    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding for text.

        Raises:
            OpenAIClientError: If the request fails
        """
        try:
            response = await self.async_client.embeddings.create(model=self.model, input=text.replace('\n', ' '))
        except OpenAIError as e:
            logger.error(f'OpenAI embedding failed: {e}')
            raise OpenAIClientError(f'OpenAI embedding failed: {e}') from e
        return list(response.data[0].embedding)

    async def health_check(self) -> bool:
        try:
            return len(await self.embed('test')) > 0
        except Exception as e:
            logger.error(f'OpenAI Embed health check failed: {e}')
            return False
