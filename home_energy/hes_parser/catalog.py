"""Closed catalog of HES report features and the suggestion row type."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Literal

Section = Literal["priority", "additional"]

SUPERSCRIPT_DIGITS = "¹²³⁴⁵⁶⁷⁸⁹⁰"

PRIORITY: Section = "priority"
ADDITIONAL: Section = "additional"
SECTIONS: tuple[Section, ...] = (PRIORITY, ADDITIONAL)

CONDITION_UNKNOWN = "N/A"
RECOMMENDATION_UNKNOWN = ""

PRIORITY_FEATURES: tuple[str, ...] = (
    "Air Conditioner",
    "Envelope/Air sealing",
    "Heating equipment",
    "Water Heater",
)

ADDITIONAL_FEATURES: tuple[str, ...] = (
    "Attic insulation",
    "Basement wall insulation",
    "Cathedral Ceiling/Roof",
    "Duct insulation",
    "Duct sealing",
    "Floor insulation",
    "Foundation wall insulation",
    "Knee Wall insulation",
    "Skylights",
    "Wall insulation",
    "Windows",
    "Solar PV",
)

SECTION_FEATURES: dict[Section, tuple[str, ...]] = {
    PRIORITY: PRIORITY_FEATURES,
    ADDITIONAL: ADDITIONAL_FEATURES,
}


@dataclass
class SuggestionRow:
    """One feature row of the priority or additional recommendations table."""

    section: Section
    feature: str
    todays_condition: str = CONDITION_UNKNOWN
    recommendation: str = RECOMMENDATION_UNKNOWN

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def features_for(section: Section) -> tuple[str, ...]:
    return SECTION_FEATURES[section]


def feature_pattern(feature: str) -> re.Pattern[str]:
    """Regex for a feature name tolerant of spacing and footnote markers."""

    body = r"\s*".join(re.escape(part) for part in feature.split())
    return re.compile(rf"\b{body}[0-9{SUPERSCRIPT_DIGITS}]*", re.IGNORECASE)


def build_template_rows() -> list[SuggestionRow]:
    return [
        SuggestionRow(section=section, feature=feature)
        for section in SECTIONS
        for feature in SECTION_FEATURES[section]
    ]


def template_size() -> int:
    return sum(len(features) for features in SECTION_FEATURES.values())
