"""
Amazon Bedrock LLM client wrapper with tool use, retry logic and error handling.
"""

import asyncio
import random
import time
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import BedrockLLMConfig
from .json_utils import dumps_arguments
from .logging_config import get_logger
from .tool_calls import LLMResponse, ToolCall

logger = get_logger(__name__)


class BedrockLLMError(Exception):
    """Custom exception for Bedrock LLM errors."""
    pass


def to_bedrock_tools(tools: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Convert OpenAI-style function tools into a Bedrock Converse toolConfig."""
    specs = []
    for tool in tools:
        function = tool.get('function', tool)
        specs.append({
            'toolSpec': {
                'name': function['name'],
                'description': function.get('description', ''),
                'inputSchema': {
                    'json': function.get('parameters', {'type': 'object'})
                }
            }
        })
    return {'tools': specs}


def to_bedrock_messages(messages: List[Dict[str, str]]):
    """Split generic chat messages into a Bedrock system block list and message list."""
    system = []
    converse_messages = []
    for msg in messages:
        if msg['role'] == 'system':
            system.append({'text': msg['content']})
        else:
            converse_messages.append({'role': msg['role'], 'content': [{'text': msg['content']}]})
    return system, converse_messages


class BedrockLLM:
    """Amazon Bedrock LLM client with retry logic and error handling."""

    def __init__(self, config: BedrockLLMConfig):
        """
        Initialize Bedrock LLM client.

        Args:
            config: BedrockLLMConfig instance with connection parameters
        """
        self.config = config
        self.model_id = config.model_id

        # Create Bedrock runtime client with timeout configuration
        self.bedrock_runtime = boto3.client(
            'bedrock-runtime',
            region_name=config.region,
            config=BotoConfig(
                connect_timeout=600,
                read_timeout=600,
                retries={'max_attempts': 0}  # We handle retries manually
            ))

        logger.info(f'Initialized Bedrock LLM client with model: {self.model_id}')

    async def generate_response(self,
                                messages: List[Dict[str, str]],
                                tools: Optional[List[Dict[str, Any]]] = None,
                                max_tokens: Optional[int] = None,
                                temperature: Optional[float] = None) -> LLMResponse:
        """
        Generate a response, optionally letting the model call tools.

        Args:
            messages: Chat messages as {'role', 'content'} dicts; system messages are allowed
            tools: OpenAI-style function tool definitions
            max_tokens: Maximum tokens to generate (uses config default if None)
            temperature: Temperature for generation (uses config default if None)

        Returns:
            LLMResponse with text content and tool calls

        Raises:
            BedrockLLMError: If all retry attempts fail
        """
        return await asyncio.to_thread(self._converse_with_retry, messages, tools, max_tokens, temperature)

    def _converse_with_retry(self,
                             messages: List[Dict[str, str]],
                             tools: Optional[List[Dict[str, Any]]],
                             max_tokens: Optional[int],
                             temperature: Optional[float]) -> LLMResponse:
        max_tokens = max_tokens or self.config.max_tokens
        temperature = temperature if temperature is not None else self.config.temperature

        system, converse_messages = to_bedrock_messages(messages)
        request = {
            'modelId': self.model_id,
            'messages': converse_messages,
            'inferenceConfig': {
                'maxTokens': max_tokens,
                'temperature': temperature,
            },
        }
        if system:
            request['system'] = system
        if tools:
            request['toolConfig'] = to_bedrock_tools(tools)

        for attempt in range(self.config.retry_attempts):
            try:
                logger.debug(f'Bedrock LLM request attempt {attempt + 1}/{self.config.retry_attempts}')

                response = self.bedrock_runtime.converse(**request)
                result = self._parse_converse_output(response)

                logger.debug(f'Bedrock LLM response generated successfully '
                             f'(length: {len(result.content)}, tool calls: {len(result.tool_calls)})')
                return result

            except (ClientError, BotoCoreError) as e:
                logger.warning(f'Bedrock LLM attempt {attempt + 1}/{self.config.retry_attempts} failed: {e}')

                if attempt < self.config.retry_attempts - 1:
                    # Exponential backoff with jitter
                    delay = self.config.retry_delay * (2**attempt) + random.uniform(0, 1)
                    time.sleep(delay)
                else:
                    raise BedrockLLMError(f'Bedrock LLM failed after {self.config.retry_attempts} attempts: {e}')

            except Exception as e:
                logger.error(f'Unexpected error in Bedrock LLM: {e}')
                raise BedrockLLMError(f'Unexpected Bedrock LLM error: {e}')

        raise BedrockLLMError(f'Bedrock LLM failed after {self.config.retry_attempts} attempts')

    @staticmethod
    def _parse_converse_output(response: Dict[str, Any]) -> LLMResponse:
        blocks = response.get('output', {}).get('message', {}).get('content', [])
        text_parts = []
        tool_calls = []
        for block in blocks:
            if 'text' in block:
                text_parts.append(block['text'])
            if 'toolUse' in block:
                tool_use = block['toolUse']
                tool_calls.append(ToolCall(name=tool_use.get('name', ''), arguments=dumps_arguments(tool_use.get('input', {}))))
        return LLMResponse(content=''.join(text_parts), tool_calls=tool_calls)

    async def health_check(self) -> bool:
        """
        Perform a health check on the Bedrock LLM service.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            test_messages = [{
                'role': 'system',
                'content': "You are a helpful assistant. Respond with just 'OK'."
            }, {
                'role': 'user',
                'content': 'Hi'
            }]
            response = await self.generate_response(messages=test_messages, max_tokens=10, temperature=0.0)
            return len(response.content.strip()) > 0

        except Exception as e:
            logger.error(f'Bedrock LLM health check failed: {e}')
            return False
