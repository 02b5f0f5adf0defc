"""Spell-correct and complete free-text addresses with a language model.

The adapter never raises: a failed call, a timeout or output that cannot be
read as a correction all degrade to the original address with zero
confidence. Model output is read by an ordered chain of parsers, each of
which either returns a mapping or gives up.
"""

import asyncio
import json
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from app.address.stats import StatsTracker
from app.address.types import CorrectionResult
from app.core.logging import get_logger
from app.core.metrics import CORRECTIONS_TOTAL
from app.llm.providers.base import BaseLLMProvider
from app.llm.providers.types import GenerateConfig, LLMResponse

logger = get_logger().bind(module="address_corrector")

PROMPT_TEMPLATE = """You are an address correction assistant for addresses in {region}.
A user typed the following address or place name:
"{address}"

Your task is to:
1. Fix spelling mistakes in street, neighbourhood, town, local government and state names.
2. Add obviously missing components (for example the town, local government area or state).
3. Keep the components comma-separated in this order: street, neighbourhood, town, local government, state.
4. Do not invent house numbers or streets that are not implied by the input.

Respond ONLY with a JSON object with these keys:
 - "correctedAddress": the corrected address as a single string
 - "corrections": a list of short strings describing each change you made (empty if none)
 - "confidence": a number between 0 and 1 describing how sure you are
"""

CORRECTION_SCHEMA: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "address_correction",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "correctedAddress": {"type": "string"},
                "corrections": {"type": "array", "items": {"type": "string"}},
                "confidence": {"type": "number"},
            },
            "required": ["correctedAddress", "corrections", "confidence"],
            "additionalProperties": False,
        },
    },
}

# Escape sequences models leave behind when they double-encode their JSON
ESCAPE_ARTIFACTS: tuple[tuple[str, str], ...] = (
    ('\\"', '"'),
    ("\\n", " "),
    ("\\r", " "),
    ("\\t", " "),
    ("\\\\", "\\"),
)
QUOTE_CHARACTERS = "\"'`"

ParseStrategy = Callable[[LLMResponse], dict[str, Any] | None]


def _loads_object(text: str) -> dict[str, Any] | None:
    """Parse text as a JSON object, unwrapping one level of string encoding."""
    try:
        value: Any = json.loads(text)
        if isinstance(value, str):
            value = json.loads(value)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _unescape(text: str) -> str:
    for artifact, replacement in ESCAPE_ARTIFACTS:
        text = text.replace(artifact, replacement)
    return text.strip().strip(QUOTE_CHARACTERS).strip()


def parse_structured(response: LLMResponse) -> dict[str, Any] | None:
    """Use output the provider already parsed into an object."""
    return response.parsed if isinstance(response.parsed, dict) else None


def parse_json_text(response: LLMResponse) -> dict[str, Any] | None:
    """Parse the response text directly."""
    return _loads_object(response.text.strip())


def parse_unescaped_text(response: LLMResponse) -> dict[str, Any] | None:
    """Parse after removing escape artefacts and surrounding quotes."""
    return _loads_object(_unescape(response.text))


def parse_embedded_object(response: LLMResponse) -> dict[str, Any] | None:
    """Parse the brace-delimited object embedded in surrounding prose."""
    text = _unescape(response.text)
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _loads_object(text[start : end + 1])


PARSE_STRATEGIES: tuple[ParseStrategy, ...] = (
    parse_structured,
    parse_json_text,
    parse_unescaped_text,
    parse_embedded_object,
)


def parse_correction(
    response: LLMResponse,
    strategies: tuple[ParseStrategy, ...] = PARSE_STRATEGIES,
) -> tuple[CorrectionResult, str] | None:
    """Read a CorrectionResult from model output.

    Args:
        response: Provider response
        strategies: Parsers tried in order; the first valid result wins

    Returns:
        The result and the name of the strategy that produced it, or None
    """
    for strategy in strategies:
        candidate = strategy(response)
        if candidate is None:
            continue
        try:
            return CorrectionResult.model_validate(candidate), strategy.__name__
        except ValidationError as e:
            logger.debug(
                "correction_candidate_rejected",
                strategy=strategy.__name__,
                errors=e.error_count(),
            )
    return None


def build_prompt(address: str, region: str) -> str:
    """Build the correction instruction for one address."""
    return PROMPT_TEMPLATE.format(region=region, address=address.replace('"', "'"))


class CorrectorAdapter:
    """Wraps a single LLM call that corrects an address."""

    def __init__(
        self,
        provider: BaseLLMProvider[Any, Any],
        stats: StatsTracker,
        region: str = "Nigeria",
        timeout: float = 30,
        temperature: float = 0.1,
        max_tokens: int = 512,
    ) -> None:
        self.provider = provider
        self.stats = stats
        self.region = region
        self.timeout = timeout
        self.generate_config = GenerateConfig(
            temperature=temperature, max_tokens=max_tokens
        )

    async def _generate(self, address: str) -> LLMResponse:
        format = (
            CORRECTION_SCHEMA if self.provider.supports_structured_output() else None
        )
        return await asyncio.wait_for(
            self.provider.generate(
                build_prompt(address, self.region),
                config=self.generate_config,
                format=format,
            ),
            timeout=self.timeout,
        )

    async def correct(self, address: str) -> CorrectionResult:
        """Correct an address, falling back to the input on any failure.

        Args:
            address: Raw address text from the user

        Returns:
            CorrectionResult; confidence 0 means the call failed
        """
        outcome = "corrected"
        try:
            response = await self._generate(address)
            parsed = parse_correction(response)
            if parsed is None:
                raise ValueError("Model output is not a valid correction object")
            result, strategy = parsed
            logger.info(
                "address_corrected",
                strategy=strategy,
                corrections=len(result.corrections),
                confidence=result.confidence,
            )
        except TimeoutError:
            outcome = "timeout"
            logger.warning("address_correction_failed", error="timeout")
            result = CorrectionResult.fallback(address)
        except Exception as e:
            outcome = "failed"
            logger.warning(
                "address_correction_failed",
                error=str(e),
                error_type=e.__class__.__name__,
            )
            result = CorrectionResult.fallback(address)

        self.stats.record(address, result)
        CORRECTIONS_TOTAL.labels(outcome=outcome).inc()
        return result
