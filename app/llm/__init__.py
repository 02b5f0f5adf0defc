"""LLM providers used for address correction"""

from app.llm.config import LLMConfig
from app.llm.providers.base import BaseLLMProvider
from app.llm.providers.cloudflare import CloudflareConfig, CloudflareProvider
from app.llm.providers.factory import create_provider
from app.llm.providers.openai import OpenAIConfig, OpenAIProvider

__all__ = [
    "LLMConfig",
    "BaseLLMProvider",
    "CloudflareConfig",
    "CloudflareProvider",
    "OpenAIConfig",
    "OpenAIProvider",
    "create_provider",
]
