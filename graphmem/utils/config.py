"""
Configuration management for model providers, the graph store and application settings.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """Raised when required collaborator configuration is missing or invalid."""
    pass


@dataclass
class BedrockLLMConfig:
    """Configuration for Amazon Bedrock LLM service."""
    region: str
    model_id: str
    max_tokens: int
    temperature: float
    retry_attempts: int
    retry_delay: float


@dataclass
class BedrockEmbedConfig:
    """Configuration for Amazon Bedrock Embed service."""
    region: str
    model_id: str
    dimension: int
    retry_attempts: int
    retry_delay: float


@dataclass
class OpenAIConfig:
    """Configuration for OpenAI (or OpenAI-compatible) chat and embedding endpoints."""
    api_key: Optional[str]
    base_url: Optional[str]
    model: str
    embedding_model: str
    temperature: float
    max_tokens: int


@dataclass
class FalkorDBConfig:
    """Configuration for the FalkorDB graph database."""
    host: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None
    graph_name: str = 'mem0'


@dataclass
class GraphStoreConfig:
    """Configuration for the graph memory store."""
    provider: str
    falkordb: FalkorDBConfig
    llm_provider: Optional[str] = None
    custom_prompt: Optional[str] = None


@dataclass
class MCPConfig:
    """Configuration for MCP interface."""
    transport: str
    host: str
    port: int


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    llm_provider: str
    embedder_provider: str
    bedrock_llm: BedrockLLMConfig
    bedrock_embed: BedrockEmbedConfig
    openai: OpenAIConfig
    graph_store: Optional[GraphStoreConfig]
    mcp: MCPConfig


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value if value else None


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')

    # Bedrock configuration
    bedrock_llm_config = BedrockLLMConfig(region=os.getenv('BEDROCK_LLM_AWS_REGION', 'us-east-1'),
                                          model_id=os.getenv('BEDROCK_LLM_MODEL_ID', 'anthropic.claude-3-sonnet-20240229-v1:0'),
                                          max_tokens=int(os.getenv('BEDROCK_LLM_MAX_TOKENS', '4096')),
                                          temperature=float(os.getenv('BEDROCK_LLM_TEMPERATURE', '0.0')),
                                          retry_attempts=int(os.getenv('BEDROCK_LLM_RETRY_ATTEMPTS', '3')),
                                          retry_delay=float(os.getenv('BEDROCK_LLM_RETRY_DELAY', '1.0')))

    # Bedrock Embed configuration
    bedrock_embed_config = BedrockEmbedConfig(region=os.getenv('BEDROCK_EMBED_AWS_REGION', 'us-east-1'),
                                              model_id=os.getenv('BEDROCK_EMBED_MODEL_ID', 'amazon.titan-embed-text-v2:0'),
                                              dimension=int(os.getenv('BEDROCK_EMBED_DIMENSION', '1024')),
                                              retry_attempts=int(os.getenv('BEDROCK_EMBED_RETRY_ATTEMPTS', '3')),
                                              retry_delay=float(os.getenv('BEDROCK_EMBED_RETRY_DELAY', '1.0')))

    # OpenAI configuration
    openai_config = OpenAIConfig(api_key=_optional_env('OPENAI_API_KEY'),
                                 base_url=_optional_env('OPENAI_BASE_URL'),
                                 model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
                                 embedding_model=os.getenv('OPENAI_EMBEDDING_MODEL', 'text-embedding-3-small'),
                                 temperature=float(os.getenv('OPENAI_TEMPERATURE', '0.0')),
                                 max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', '4096')))

    # Graph store configuration
    falkordb_config = FalkorDBConfig(host=os.getenv('FALKORDB_HOST', 'localhost'),
                                     port=int(os.getenv('FALKORDB_PORT', '6379')),
                                     username=_optional_env('FALKORDB_USERNAME'),
                                     password=_optional_env('FALKORDB_PASSWORD'),
                                     graph_name=os.getenv('FALKORDB_GRAPH_NAME', 'mem0'))

    graph_store_provider = os.getenv('GRAPH_STORE_PROVIDER', 'falkordb').strip().lower()
    graph_store_config = None
    if graph_store_provider == 'falkordb':
        graph_store_config = GraphStoreConfig(provider=graph_store_provider,
                                              falkordb=falkordb_config,
                                              llm_provider=_optional_env('GRAPH_STORE_LLM_PROVIDER'),
                                              custom_prompt=_optional_env('GRAPH_STORE_CUSTOM_PROMPT'))

    # MCP configuration
    mcp_config = MCPConfig(transport=os.getenv('MCP_TRANSPORT', 'sse'),
                           host=os.getenv('MCP_HOST', '127.0.0.1'),
                           port=int(os.getenv('MCP_PORT', '8000')))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     llm_provider=os.getenv('LLM_PROVIDER', 'bedrock').strip().lower(),
                     embedder_provider=os.getenv('EMBEDDER_PROVIDER', 'bedrock').strip().lower(),
                     bedrock_llm=bedrock_llm_config,
                     bedrock_embed=bedrock_embed_config,
                     openai=openai_config,
                     graph_store=graph_store_config,
                     mcp=mcp_config)


# Global configuration instance
config = load_config()
