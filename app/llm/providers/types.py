"""Type definitions for LLM providers."""

import copy
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, Field, field_validator


@dataclass
class GenerateConfig:
    """Configuration for generation requests."""

    temperature: float = 0.1
    max_tokens: int = 512
    stop: list[str] | None = None
    format: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not 0 <= self.temperature <= 1:
            raise ValueError("Temperature must be between 0 and 1")
        if self.max_tokens < 1:
            raise ValueError("Max tokens must be positive")
        if self.stop is not None:
            if any(not s for s in self.stop):
                raise ValueError("Stop sequences cannot be empty")


class LLMResponse(BaseModel):
    """Standard response format for LLM generations."""

    text: str = Field(description="Generated text content")
    model: str = Field(description="Name of the model used")
    usage: dict[str, int] = Field(
        default_factory=dict, description="Token usage statistics"
    )
    raw: dict[str, Any] | None = Field(
        default_factory=lambda: {}, description="Raw response data"
    )
    parsed: Any | None = Field(
        default=None, description="Parsed structured output if available"
    )

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Validate text field."""
        if not v or v.isspace():
            raise ValueError("Response text cannot be empty")
        return v

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Validate model field."""
        if not v or v.isspace():
            raise ValueError("Model name cannot be empty")
        return v

    @field_validator("usage", mode="before")
    @classmethod
    def validate_usage(cls, v: dict[str, Any] | None) -> dict[str, int]:
        """Validate usage statistics."""
        if not v:
            return {}
        result: dict[str, int] = {}
        for key, value in v.items():
            if value is None:
                continue
            if not isinstance(value, int | float) or float(value) != int(value):
                raise ValueError("Usage values must be integers")
            if value < 0:
                raise ValueError("Usage values must be non-negative")
            result[key] = int(value)
        return result

    def model_post_init(self, _: Any) -> None:
        """Post-initialization processing."""
        # Ensure immutability of nested structures
        if self.raw is None:
            self.raw = {}
        elif self.raw:
            self.raw = copy.deepcopy(self.raw)
        if self.parsed:
            self.parsed = copy.deepcopy(self.parsed)

    @property
    def content(self) -> str:
        """Get the generated text content."""
        return self.text

    def __str__(self) -> str:
        """String representation of the response."""
        return self.text


LLMInput = Union[str, list[dict[str, Any]]]  # Text or chat messages
