"""Data model for address correction, decomposition and search results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Order in which components appear in the formatted query
COMPONENT_ORDER: tuple[str, ...] = (
    "street",
    "neighbourhood",
    "town",
    "local_government",
    "state",
)


class CamelModel(BaseModel):
    """Base model serialised with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CorrectionResult(CamelModel):
    """Output of the correction step.

    A confidence of zero with no corrections means the correction call
    failed and ``corrected_address`` is the untouched input.
    """

    corrected_address: str = Field(..., description="Corrected address text")
    corrections: list[str] = Field(
        default_factory=list, description="Human-readable list of changes made"
    )
    confidence: float = Field(default=0.0, ge=0, le=1)

    @field_validator("corrected_address")
    @classmethod
    def validate_corrected_address(cls, v: str) -> str:
        """Reject blank corrected addresses."""
        if not v or v.isspace():
            raise ValueError("Corrected address cannot be empty")
        return v.strip()

    @field_validator("corrections", mode="before")
    @classmethod
    def coerce_corrections(cls, v: Any) -> list[str]:
        """Accept a single string or a list of arbitrary values."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        if not isinstance(v, list | tuple):
            raise ValueError("Corrections must be a list")
        return [str(item) for item in v if item is not None and str(item).strip()]

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        """Clamp confidence into the unit interval."""
        if v is None:
            return 0.0
        try:
            value = float(v)
        except (TypeError, ValueError) as e:
            raise ValueError("Confidence must be a number") from e
        return min(max(value, 0.0), 1.0)

    @property
    def is_degraded(self) -> bool:
        """Whether this result came from a failed correction call."""
        return self.confidence == 0

    @classmethod
    def fallback(cls, address: str) -> "CorrectionResult":
        """Build the safe result used when correction fails."""
        return cls.model_construct(
            corrected_address=address, corrections=[], confidence=0.0
        )


class AlternativeQueries(CamelModel):
    """Single-component queries used when the full query under-delivers."""

    neighbourhood_only: str | None = None
    town_only: str | None = None
    local_government_only: str | None = None


class FormattedAddress(CamelModel):
    """Structured decomposition of a corrected address.

    ``formatted_query`` and ``alternative_queries`` are always rebuilt from
    the components, so they can never mention a component that is absent.
    """

    street: str | None = None
    neighbourhood: str | None = None
    town: str | None = None
    local_government: str | None = None
    state: str | None = None
    formatted_query: str = ""
    alternative_queries: AlternativeQueries = Field(default_factory=AlternativeQueries)

    @model_validator(mode="after")
    def derive_queries(self) -> "FormattedAddress":
        """Derive the query strings from the assigned components."""
        for name in COMPONENT_ORDER:
            value = getattr(self, name)
            if value is not None and not value.strip():
                setattr(self, name, None)

        self.formatted_query = ", ".join(value for _, value in self.components())
        self.alternative_queries = AlternativeQueries(
            neighbourhood_only=self.neighbourhood,
            town_only=self.town,
            local_government_only=self.local_government,
        )
        return self

    def components(self) -> list[tuple[str, str]]:
        """Assigned components as (name, value) pairs in query order."""
        return [
            (name, getattr(self, name))
            for name in COMPONENT_ORDER
            if getattr(self, name) is not None
        ]


class HistoryEntry(CamelModel):
    """A processed address kept in the rolling history."""

    original: str
    corrected: str
    timestamp: str


class CorrectionCounters(CamelModel):
    """Aggregate correction counters."""

    spelling_corrected: int = 0
    missing_components_added: int = 0
    total_processed: int = 0


class StatsSnapshot(CamelModel):
    """Read-only view of the correction statistics."""

    stats: CorrectionCounters
    recent_addresses: list[HistoryEntry] = Field(default_factory=list)


class CascadeResult(CamelModel):
    """Primary geocoding results plus any fallback results by category."""

    results: list[dict[str, Any]] = Field(default_factory=list)
    alternative_results: dict[str, list[dict[str, Any]]] | None = None
