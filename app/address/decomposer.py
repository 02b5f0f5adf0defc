"""Decompose a corrected address string into positional components.

The corrected address is normalised, stripped of noise (house numbers,
relative-position fillers, determiners) and split into segments. Segments
are then assigned left to right: street, then either a neighbourhood or a
town, then town (only after a neighbourhood), local government and state.
A segment that names a neighbourhood consumes an extra slot and pushes every
later assignment one segment down.
"""

import re
from enum import Enum

from app.address.types import FormattedAddress

WHITESPACE_PATTERN = re.compile(r"\s+")

# Applied in order: later patterns can match text only exposed by earlier ones
NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # House numbers: "15", "15b", "no. 15", "no 15", "number 15"
    re.compile(r"\b(?:(?:no\.?|number)\s*)?\d+[a-z]?\b"),
    # Relative-position fillers
    re.compile(
        r"\b(?:in front of|adjacent to|next to|opposite|behind|beside|near|off)\b"
    ),
    # Determiners and prepositions
    re.compile(r"\b(?:the|at|on|in)\b"),
)

SEGMENT_SEPARATOR = re.compile(r"[,/\\]")

NEIGHBOURHOOD_MARKERS: tuple[str, ...] = ("district", "area", "quarter")


class Slot(str, Enum):
    """Next component a segment will be assigned to."""

    STREET = "street"
    NEIGHBOURHOOD_OR_TOWN = "neighbourhood_or_town"
    TOWN = "town"
    LOCAL_GOVERNMENT = "local_government"
    STATE = "state"
    DONE = "done"


def normalize(text: str) -> str:
    """Lower-case, collapse whitespace and trim."""
    return WHITESPACE_PATTERN.sub(" ", text.lower()).strip()


def strip_noise(text: str) -> str:
    """Remove house numbers and filler words from normalised text."""
    for pattern in NOISE_PATTERNS:
        text = pattern.sub(" ", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def split_segments(text: str) -> list[str]:
    """Split on comma, slash or backslash, dropping empty segments."""
    segments = (segment.strip() for segment in SEGMENT_SEPARATOR.split(text))
    return [segment for segment in segments if segment]


def is_neighbourhood(segment: str) -> bool:
    """Whether a segment names a neighbourhood rather than a town."""
    return any(marker in segment for marker in NEIGHBOURHOOD_MARKERS)


def assign_components(segments: list[str]) -> dict[str, str]:
    """Assign segments to component names.

    Args:
        segments: Cleaned segments in their original order

    Returns:
        Mapping of component name to segment text for assigned components
    """
    components: dict[str, str] = {}
    slot = Slot.STREET

    for segment in segments:
        if slot is Slot.DONE:
            break

        if slot is Slot.STREET:
            components["street"] = segment
            slot = Slot.NEIGHBOURHOOD_OR_TOWN
        elif slot is Slot.NEIGHBOURHOOD_OR_TOWN:
            if is_neighbourhood(segment):
                components["neighbourhood"] = segment
                slot = Slot.TOWN
            else:
                components["town"] = segment
                slot = Slot.LOCAL_GOVERNMENT
        elif slot is Slot.TOWN:
            components["town"] = segment
            slot = Slot.LOCAL_GOVERNMENT
        elif slot is Slot.LOCAL_GOVERNMENT:
            components["local_government"] = segment
            slot = Slot.STATE
        elif slot is Slot.STATE:
            components["state"] = segment
            slot = Slot.DONE

    return components


def decompose(corrected_address: str) -> FormattedAddress:
    """Decompose a corrected address into a FormattedAddress.

    Never raises; input that is empty or only noise yields an empty
    FormattedAddress whose formatted query is "".

    Args:
        corrected_address: Address text, usually the output of correction

    Returns:
        FormattedAddress with components, formatted query and alternatives
    """
    cleaned = strip_noise(normalize(corrected_address or ""))
    return FormattedAddress(**assign_components(split_segments(cleaned)))
