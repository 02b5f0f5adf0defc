"""Build the configured LLM provider."""

from typing import Any, cast

from app.core.config import Settings
from app.llm.providers.base import BaseLLMProvider
from app.llm.providers.cloudflare import CloudflareConfig, CloudflareProvider
from app.llm.providers.cloudflare import DEFAULT_MODEL as CLOUDFLARE_DEFAULT_MODEL
from app.llm.providers.openai import OpenAIConfig, OpenAIProvider

OPENAI_DEFAULT_MODEL = "google/gemini-2.0-flash-001"


def create_provider(settings: Settings) -> BaseLLMProvider[Any, Any]:
    """Create the provider selected by ``LLM_PROVIDER``.

    Args:
        settings: Application settings

    Returns:
        Configured provider instance

    Raises:
        ValueError: If the provider name is not supported
    """
    llm_provider = settings.LLM_PROVIDER.lower()

    if llm_provider == "openai":
        openai_config = OpenAIConfig(
            model_name=settings.LLM_MODEL_NAME or OPENAI_DEFAULT_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            timeout=settings.LLM_TIMEOUT,
        )
        return cast(
            BaseLLMProvider[Any, Any],
            OpenAIProvider(
                openai_config,
                api_key=settings.OPENROUTER_API_KEY,
                base_url=settings.LLM_BASE_URL,
            ),
        )
    if llm_provider == "cloudflare":
        cloudflare_config = CloudflareConfig(
            model_name=settings.LLM_MODEL_NAME or CLOUDFLARE_DEFAULT_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            timeout=settings.LLM_TIMEOUT,
        )
        return cast(
            BaseLLMProvider[Any, Any],
            CloudflareProvider(
                cloudflare_config,
                account_id=settings.CLOUDFLARE_ACCOUNT_ID,
                api_key=settings.CLOUDFLARE_API_TOKEN,
                base_url=settings.LLM_BASE_URL,
            ),
        )

    raise ValueError(
        f"Unsupported LLM provider: {llm_provider}. "
        f"Supported providers: openai, cloudflare"
    )
