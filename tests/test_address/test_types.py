"""Tests for the address data model."""

import pytest
from pydantic import ValidationError

from app.address.types import (
    CascadeResult,
    CorrectionResult,
    FormattedAddress,
    StatsSnapshot,
)


class TestCorrectionResult:
    """Validation and coercion of model output."""

    def test_accepts_camel_case_keys(self) -> None:
        result = CorrectionResult.model_validate(
            {"correctedAddress": "Ikeja", "corrections": [], "confidence": 0.5}
        )
        assert result.corrected_address == "Ikeja"

    def test_accepts_field_names(self) -> None:
        result = CorrectionResult(corrected_address="Ikeja", confidence=0.5)
        assert result.corrections == []

    def test_rejects_blank_address(self) -> None:
        with pytest.raises(ValidationError):
            CorrectionResult.model_validate({"correctedAddress": "   "})

    def test_rejects_missing_address(self) -> None:
        with pytest.raises(ValidationError):
            CorrectionResult.model_validate({"corrections": ["x"]})

    @pytest.mark.parametrize(
        "value,expected",
        [(None, []), ("one fix", ["one fix"]), ("", []), (["a", None, 3], ["a", "3"])],
    )
    def test_coerces_corrections(self, value: object, expected: list[str]) -> None:
        result = CorrectionResult.model_validate(
            {"correctedAddress": "Ikeja", "corrections": value}
        )
        assert result.corrections == expected

    def test_rejects_non_list_corrections(self) -> None:
        with pytest.raises(ValidationError):
            CorrectionResult.model_validate(
                {"correctedAddress": "Ikeja", "corrections": {"a": 1}}
            )

    @pytest.mark.parametrize(
        "value,expected", [(None, 0.0), (-2, 0.0), (0.4, 0.4), ("0.7", 0.7), (3, 1.0)]
    )
    def test_clamps_confidence(self, value: object, expected: float) -> None:
        result = CorrectionResult.model_validate(
            {"correctedAddress": "Ikeja", "confidence": value}
        )
        assert result.confidence == expected

    def test_fallback_is_degraded(self) -> None:
        result = CorrectionResult.fallback("  raw input ")
        assert result.corrected_address == "  raw input "
        assert result.corrections == []
        assert result.confidence == 0
        assert result.is_degraded

    def test_serialises_with_camel_case(self) -> None:
        result = CorrectionResult(corrected_address="Ikeja", confidence=1)
        assert result.model_dump(by_alias=True) == {
            "correctedAddress": "Ikeja",
            "corrections": [],
            "confidence": 1.0,
        }


class TestFormattedAddress:
    """Derived fields are always rebuilt from the components."""

    def test_derives_query_in_fixed_order(self) -> None:
        formatted = FormattedAddress(state="lagos", street="allen avenue", town="ikeja")
        assert formatted.formatted_query == "allen avenue, ikeja, lagos"

    def test_ignores_supplied_derived_fields(self) -> None:
        formatted = FormattedAddress.model_validate(
            {"town": "ikeja", "formattedQuery": "somewhere else"}
        )
        assert formatted.formatted_query == "ikeja"

    def test_blank_components_are_absent(self) -> None:
        formatted = FormattedAddress(street="  ", town="ikeja")
        assert formatted.street is None
        assert formatted.components() == [("town", "ikeja")]

    def test_serialises_without_absent_components(self) -> None:
        formatted = FormattedAddress(street="allen avenue", town="ikeja")
        assert formatted.model_dump(by_alias=True, exclude_none=True) == {
            "street": "allen avenue",
            "town": "ikeja",
            "formattedQuery": "allen avenue, ikeja",
            "alternativeQueries": {"townOnly": "ikeja"},
        }

    def test_local_government_alias(self) -> None:
        formatted = FormattedAddress.model_validate({"localGovernment": "eti-osa"})
        assert formatted.alternative_queries.local_government_only == "eti-osa"
        assert "localGovernmentOnly" in formatted.alternative_queries.model_dump(
            by_alias=True
        )


def test_snapshot_serialises_recent_addresses_key() -> None:
    """Stats snapshots use the recentAddresses key."""
    data = StatsSnapshot.model_validate({"stats": {}}).model_dump(by_alias=True)
    assert data == {
        "stats": {
            "spellingCorrected": 0,
            "missingComponentsAdded": 0,
            "totalProcessed": 0,
        },
        "recentAddresses": [],
    }


def test_cascade_result_defaults() -> None:
    """Cascade results default to no matches and no alternatives."""
    result = CascadeResult()
    assert result.results == []
    assert result.alternative_results is None
