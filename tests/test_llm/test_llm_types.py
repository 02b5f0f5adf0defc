"""Tests for LLM configuration and response types."""

import pytest

from app.llm.base import BaseModelConfig
from app.llm.config import LLMConfig
from app.llm.providers.types import GenerateConfig, LLMResponse


class TestGenerateConfig:
    """Generation settings are validated on creation."""

    def test_defaults(self) -> None:
        config = GenerateConfig()
        assert config.temperature == 0.1
        assert config.max_tokens == 512
        assert config.format is None

    @pytest.mark.parametrize(
        "kwargs",
        [{"temperature": 1.5}, {"max_tokens": 0}, {"stop": ["", "x"]}],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            GenerateConfig(**kwargs)


class TestLLMConfig:
    """Provider configuration validation."""

    def test_stores_values(self) -> None:
        config = LLMConfig(model_name="m", temperature=0.4, timeout=5, extra_flag=True)
        assert config.model_name == "m"
        assert config.default_temp == 0.4
        assert config.extra == {"extra_flag": True}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"model_name": " "},
            {"model_name": "m", "temperature": -0.1},
            {"model_name": "m", "temperature": 2},
            {"model_name": "m", "max_tokens": 0},
            {"model_name": "m", "timeout": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            LLMConfig(**kwargs)

    def test_base_config_rejects_bad_context_length(self) -> None:
        with pytest.raises(ValueError, match="Context length"):
            BaseModelConfig(context_length=0, max_tokens=None)


class TestLLMResponse:
    """Response normalisation."""

    def test_content_and_str(self) -> None:
        response = LLMResponse(text="Ikeja", model="m")
        assert response.content == "Ikeja"
        assert str(response) == "Ikeja"
        assert response.raw == {}

    def test_rejects_empty_text(self) -> None:
        with pytest.raises(ValueError):
            LLMResponse(text="  ", model="m")

    def test_usage_drops_missing_values(self) -> None:
        response = LLMResponse(
            text="x", model="m", usage={"prompt_tokens": 3, "completion_tokens": None}
        )
        assert response.usage == {"prompt_tokens": 3}

    def test_usage_rejects_negative_values(self) -> None:
        with pytest.raises(ValueError):
            LLMResponse(text="x", model="m", usage={"prompt_tokens": -1})

    def test_parsed_is_copied(self) -> None:
        parsed = {"correctedAddress": "Ikeja"}
        response = LLMResponse(text="x", model="m", parsed=parsed)
        parsed["correctedAddress"] = "changed"
        assert response.parsed == {"correctedAddress": "Ikeja"}
