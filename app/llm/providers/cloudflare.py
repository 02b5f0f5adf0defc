"""Cloudflare Workers AI provider implementation."""

import json
from typing import Any

import httpx

from app.core.logging import get_logger
from app.llm.config import LLMConfig
from app.llm.providers.base import BaseLLMProvider
from app.llm.providers.types import GenerateConfig, LLMInput, LLMResponse

logger = get_logger().bind(module="cloudflare_provider")

DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_MODEL = "@cf/meta/llama-2-7b-chat-int8"


class CloudflareConfig(LLMConfig):
    """Configuration for Cloudflare Workers AI provider."""

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        temperature: float = 0.1,
        max_tokens: int | None = None,
        timeout: int = 30,
    ) -> None:
        """Initialize Cloudflare config.

        Args:
            model_name: Workers AI model identifier (``@cf/...``)
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum number of tokens to generate
            timeout: Request timeout in seconds
        """
        super().__init__(
            model_name=model_name,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            supports_structured=False,
            context_length=4096,
        )


class CloudflareProvider(BaseLLMProvider[httpx.AsyncClient, CloudflareConfig]):
    """Runs prompts through the Workers AI ``ai/run`` REST endpoint."""

    def __init__(
        self,
        config: CloudflareConfig,
        account_id: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Provider configuration
            account_id: Cloudflare account that owns the Workers AI binding
            api_key: API token with Workers AI permission
            base_url: Base URL of the Cloudflare API
            client: Optional pre-built HTTP client
        """
        self.config = config
        self.account_id = account_id
        self._client = client
        super().__init__(
            model_name=config.model_name,
            api_key=api_key,
            base_url=base_url or DEFAULT_BASE_URL,
        )

    def _init_config(self, **kwargs: Any) -> CloudflareConfig:
        """Return the configuration passed to the constructor."""
        return self.config

    @property
    def environment_key(self) -> str:
        """Get the environment variable name for the API token."""
        return "CLOUDFLARE_API_TOKEN"

    @property
    def model(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            api_key = self.api_key
            if not api_key:
                raise ValueError("API key is required")
            self._client = httpx.AsyncClient(
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=httpx.Timeout(self.config.timeout),
            )
        return self._client

    @property
    def run_url(self) -> str:
        """URL of the model run endpoint."""
        if not self.account_id:
            raise ValueError("Cloudflare account id is required")
        return f"{self.base_url}/accounts/{self.account_id}/ai/run/{self.model_name}"

    def _build_payload(
        self, prompt: LLMInput, config: GenerateConfig | None = None
    ) -> dict[str, Any]:
        """Build the JSON body for a run request."""
        payload: dict[str, Any] = {}
        if isinstance(prompt, str):
            payload["prompt"] = prompt
        else:
            payload["messages"] = prompt
        payload["temperature"] = (
            config.temperature if config else self.config.temperature
        )
        max_tokens = self.config.max_tokens or (config.max_tokens if config else None)
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    def _process_api_response(self, body: dict[str, Any]) -> LLMResponse:
        """Normalise a Workers AI response body.

        Raises:
            ValueError: If the API reported a failure or returned no content
        """
        if not body.get("success", True):
            errors = body.get("errors") or []
            message = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in errors
            )
            raise ValueError(f"Error generating completion: {message or 'unknown'}")

        result = body.get("result") or {}
        response = result.get("response") if isinstance(result, dict) else None
        if response is None:
            raise ValueError("Error generating completion: Empty response from model")

        parsed = response if isinstance(response, dict) else None
        text = json.dumps(response) if parsed is not None else str(response)

        return LLMResponse(
            text=text,
            model=self.model_name,
            usage=result.get("usage") or {},
            raw=body,
            parsed=parsed,
        )

    async def generate(
        self,
        prompt: LLMInput,
        config: GenerateConfig | None = None,
        format: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate text from a prompt.

        Args:
            prompt: The prompt or chat messages
            config: Generation configuration
            format: Ignored; Workers AI text models answer in free text
            **kwargs: Extra fields merged into the request body

        Returns:
            LLMResponse: The generated response

        Raises:
            ValueError: If the request fails or the response is unusable
        """
        payload = self._build_payload(prompt, config)
        payload.update(kwargs)

        logger.info("Making API request to %s", self.base_url)
        try:
            response = await self.model.post(self.run_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Error in API call", status_code=e.response.status_code)
            raise ValueError(
                f"Error generating completion: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Error in API call", exc_info=e)
            raise ValueError(f"Error generating completion: {e!s}") from e
        except json.JSONDecodeError as e:
            raise ValueError("Error generating completion: response is not JSON") from e

        logger.info("Received API response from %s", self.base_url)
        return self._process_api_response(body)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
