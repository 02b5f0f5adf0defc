"""OpenAI-compatible provider implementation with structured output support."""

import json
import re
from typing import Any, cast

from openai import AsyncOpenAI
from openai._exceptions import OpenAIError
from openai.types.chat.chat_completion import ChatCompletion
from openai.types.completion_usage import CompletionUsage

from app.core.logging import get_logger
from app.llm.config import LLMConfig
from app.llm.providers.base import BaseLLMProvider
from app.llm.providers.types import GenerateConfig, LLMInput, LLMResponse

logger = get_logger().bind(module="openai_provider")

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


def _extract_openrouter_error(error_dict: dict[str, Any]) -> str:
    """Extract error message from OpenRouter error format."""
    if "metadata" not in error_dict or "raw" not in error_dict["metadata"]:
        return str(error_dict)

    try:
        raw = json.loads(error_dict["metadata"]["raw"])
        if "error" in raw and "message" in raw["error"]:
            return str(raw["error"]["message"])
    except (json.JSONDecodeError, KeyError, TypeError):
        return str(error_dict)
    return str(error_dict)


def _extract_nested_error(error_dict: dict[str, Any]) -> str:
    """Extract error message from nested error object."""
    if "error" in error_dict and isinstance(error_dict["error"], dict):
        if "message" in error_dict["error"]:
            return str(error_dict["error"]["message"])
    if "message" in error_dict:
        return str(error_dict["message"])
    return str(error_dict)


def _extract_error_message(error: Any) -> str:
    """Extract error message from API error response.

    Args:
        error: API error response

    Returns:
        str: Error message
    """
    error_dict = error if isinstance(error, dict) else {"message": str(error)}
    if "metadata" in error_dict:
        return _extract_openrouter_error(error_dict)
    return _extract_nested_error(error_dict)


def _extract_json_from_markdown(text: str) -> str:
    """Extract JSON content from markdown code blocks.

    Args:
        text: Text that may contain markdown code blocks

    Returns:
        str: Extracted JSON content or original text if no code blocks found
    """
    json_block_match = re.search(r"```(?:json)?\s*\n(.*?)\n```", text, re.DOTALL)
    if json_block_match:
        return json_block_match.group(1).strip()
    return text


def _validate_usage(usage: CompletionUsage | dict[str, Any]) -> dict[str, int]:
    """Validate and convert usage statistics."""
    if isinstance(usage, CompletionUsage):
        usage = usage.model_dump()
    return {
        "prompt_tokens": int(usage.get("prompt_tokens") or 0),
        "completion_tokens": int(usage.get("completion_tokens") or 0),
        "total_tokens": int(usage.get("total_tokens") or 0),
    }


class OpenAIConfig(LLMConfig):
    """Configuration for OpenAI provider"""

    def __init__(
        self,
        model_name: str,
        temperature: float = 0.1,
        max_tokens: int | None = None,
        timeout: int = 30,
    ) -> None:
        """Initialize OpenAI config.

        Args:
            model_name: Name of the model to use
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum number of tokens to generate
            timeout: Request timeout in seconds
        """
        super().__init__(
            model_name=model_name,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            supports_structured=True,
        )


class OpenAIProvider(BaseLLMProvider[AsyncOpenAI, OpenAIConfig]):
    """OpenAI-compatible chat completions provider (OpenRouter by default)"""

    def __init__(
        self,
        config: OpenAIConfig,
        api_key: str | None = None,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the provider

        Args:
            config: Provider configuration
            api_key: API key for authentication
            base_url: Base URL for API endpoint
            headers: Additional HTTP headers
        """
        self.config = config
        self._client: AsyncOpenAI | None = None
        super().__init__(
            model_name=config.model_name,
            api_key=api_key,
            base_url=base_url or DEFAULT_BASE_URL,
            headers=headers or {"X-Title": "Address Resolver"},
        )

    def _init_config(self, **kwargs: Any) -> OpenAIConfig:
        """Return the configuration passed to the constructor."""
        return self.config

    @property
    def environment_key(self) -> str:
        """Get the environment variable name for the API key."""
        return "OPENROUTER_API_KEY"

    @property
    def model(self) -> AsyncOpenAI:
        """Get or create the OpenAI client instance."""
        if self._client is None:
            api_key = self.api_key
            if not api_key:
                raise ValueError("API key is required")

            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self.base_url,
                default_headers=self.headers,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self._client

    def _format_messages(self, prompt: LLMInput) -> list[dict[str, str]]:
        """Format input prompt into messages list."""
        if isinstance(prompt, str):
            return [{"role": "user", "content": prompt}]
        return cast(list[dict[str, str]], prompt)

    def _build_api_params(
        self,
        messages: list[dict[str, str]],
        config: GenerateConfig | None = None,
        format: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build parameters for API call.

        Args:
            messages: Formatted messages
            config: Generation configuration
            format: Optional JSON schema for structured output

        Returns:
            dict[str, Any]: API parameters
        """
        params: dict[str, Any] = {
            "model": self.config.model_name,
            "messages": messages,
            "temperature": config.temperature if config else self.config.temperature,
        }
        if config is not None:
            params["max_tokens"] = config.max_tokens
            if config.stop:
                params["stop"] = config.stop
        if self.config.max_tokens is not None:
            params["max_tokens"] = self.config.max_tokens

        schema_format = format
        if not schema_format and config and config.format:
            schema_format = config.format

        # Schema arrives wrapped as {"type": "json_schema", "json_schema": {...}}
        if (
            isinstance(schema_format, dict)
            and schema_format.get("type") == "json_schema"
        ):
            json_schema = schema_format.get("json_schema", {})
            if "schema" in json_schema:
                params["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {
                        "name": json_schema.get("name", "response"),
                        "schema": json_schema["schema"],
                        "strict": json_schema.get("strict", True),
                    },
                }

        return params

    def _process_json_content(
        self,
        content: str,
        format: dict[str, Any] | None = None,
    ) -> tuple[str, Any | None]:
        """Process and parse JSON content.

        Args:
            content: Raw content string
            format: Optional JSON schema

        Returns:
            tuple[str, Any | None]: Processed content and parsed JSON if applicable
        """
        content = _extract_json_from_markdown(content)
        parsed = None
        if format and content:
            try:
                parsed = json.loads(content)
            except json.JSONDecodeError:
                # Leave parsing of malformed output to the caller
                logger.debug("structured_output_not_json", content=content[:200])
        return content.strip(), parsed

    def _process_api_response(
        self,
        result: ChatCompletion,
        format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Process API response.

        Raises:
            ValueError: If the API reported an error or returned no content
        """
        error = getattr(result, "error", None)
        if error:
            raise ValueError(
                f"Error generating completion: {_extract_error_message(error)}"
            )

        if not result.choices or not result.choices[0].message:
            raise ValueError(
                "No response from model"
                if not result.choices
                else "Empty response from model"
            )

        content = str(result.choices[0].message.content or "")
        processed_content, parsed = self._process_json_content(content, format)

        usage = (
            _validate_usage(result.usage)
            if result.usage
            else {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}
        )

        response_data: dict[str, Any] = {
            "text": processed_content,
            "model": self.config.model_name,
            "usage": usage,
        }
        if parsed is not None:
            response_data["parsed"] = parsed

        return LLMResponse(**response_data)

    def _handle_api_error(self, error: Exception) -> None:
        """Translate API errors into ValueError.

        Raises:
            ValueError: With appropriate error message
        """
        if isinstance(error, OpenAIError):
            logger.error("Error in API call", exc_info=error)
            raise ValueError(f"Error generating completion: {error!s}") from error
        if isinstance(error, ValueError):
            if "API key is required" in str(error):
                raise ValueError("API key is required") from error
            if str(error).startswith("Error generating completion"):
                raise error
            raise ValueError(f"Error generating completion: {error!s}") from error
        logger.error("Error in API call", exc_info=error)
        raise ValueError(
            f"Error generating completion: {_extract_error_message(error)}"
        ) from error

    async def generate(
        self,
        prompt: LLMInput,
        config: GenerateConfig | None = None,
        format: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate text from a prompt

        Args:
            prompt: The prompt to generate from
            config: Generation configuration
            format: JSON schema for structured output
            **kwargs: Additional arguments passed to the model

        Returns:
            LLMResponse: The generated response

        Raises:
            ValueError: If there is an error in generation
        """
        try:
            if format is None and config is not None and config.format:
                format = config.format

            messages = self._format_messages(prompt)
            params = self._build_api_params(messages, config, format)
            params.update(kwargs)

            logger.info("Making API request to %s", self.base_url)
            logger.debug(
                "Request parameters: %s",
                json.dumps({k: v for k, v in params.items() if k != "messages"}),
            )

            result = cast(
                ChatCompletion, await self.model.chat.completions.create(**params)
            )

            logger.info("Received API response from %s", self.base_url)
            return self._process_api_response(result, format)

        except Exception as e:
            self._handle_api_error(e)
            raise ValueError("Error in API call") from e
