"""LLM configuration."""

from typing import Any

from app.llm.base import BaseModelConfig


class LLMConfig(BaseModelConfig):
    """Configuration for LLM providers"""

    def __init__(
        self,
        model_name: str,
        temperature: float = 0.1,
        max_tokens: int | None = None,
        timeout: int = 30,
        supports_structured: bool = False,
        context_length: int = 8192,
        **kwargs: Any,
    ) -> None:
        """Initialize LLM config.

        Args:
            model_name: Name of the model to use
            temperature: Temperature for sampling (0-1)
            max_tokens: Maximum tokens to generate (>0)
            timeout: Request timeout in seconds (>0)
            supports_structured: Whether the model supports structured output
            context_length: Context window of the model
            **kwargs: Additional configuration parameters

        Raises:
            ValueError: If any parameters are invalid
        """
        if not model_name or model_name.isspace():
            raise ValueError("model_name is required")
        if temperature < 0:
            raise ValueError("Input should be greater than or equal to 0")
        if temperature > 1:
            raise ValueError("Input should be less than or equal to 1")
        if max_tokens is not None and max_tokens <= 0:
            raise ValueError("Input should be greater than 0")
        if timeout <= 0:
            raise ValueError("Input should be greater than 0")

        super().__init__(
            context_length=context_length,
            max_tokens=max_tokens,
            default_temp=temperature,
            supports_json=True,
            supports_structured=supports_structured,
        )
        self.model_name = model_name
        self.temperature = temperature
        self.timeout = timeout
        self.extra = kwargs
