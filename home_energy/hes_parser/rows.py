"""Split a feature segment into today's condition and the recommendation."""
from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .catalog import (
    ADDITIONAL,
    CONDITION_UNKNOWN,
    PRIORITY,
    RECOMMENDATION_UNKNOWN,
    Section,
    feature_pattern,
)
from .normalize import collapse_spaces

WHEN_REPLACING_RE = re.compile(r"\bwhen\s+replacing\b\s*,?", re.IGNORECASE)
REC_VERB_RE = re.compile(r"\b(insulate|install|replace|upgrade|add|seal|reduce)\b", re.IGNORECASE)
MIN_VERB_RECOMMENDATION_CHARS = 8

AIR_SEAL_RE = re.compile(r"\bprofessionally\s+air\s+seal\b", re.IGNORECASE)
NOT_SEALED_RE = re.compile(r"\bNot\b[^.]{0,80}?\bsealed\b", re.IGNORECASE)
SEER_RE = re.compile(r"(\d+(?:\.\d+)?)\s*SEER\b", re.IGNORECASE)
# Word repair turns "kW" into "k W".
SOLAR_CAPACITY_RE = re.compile(
    r"Capacity\s+of\s+(\d+(?:\.\d+)?)\s*k\s*W\s*in\s*DC", re.IGNORECASE
)


@dataclass(frozen=True)
class RowSplit:
    todays_condition: str
    recommendation: str


Override = Callable[[str, RowSplit], RowSplit]


def truncate_at_other_feature(rest: str, feature: str, features: Iterable[str]) -> str:
    """Cut ``rest`` where another catalog feature's name starts."""

    cut: int | None = None
    for other in features:
        if other == feature:
            continue
        match = feature_pattern(other).search(rest)
        if match and (cut is None or match.start() < cut):
            cut = match.start()
    if cut is None:
        return rest
    return collapse_spaces(rest[:cut])


def _split_at(rest: str, index: int) -> tuple[str, str]:
    return collapse_spaces(rest[:index]), collapse_spaces(rest[index:])


def split_priority(rest: str) -> RowSplit:
    match = WHEN_REPLACING_RE.search(rest)
    if not match:
        return RowSplit(rest, RECOMMENDATION_UNKNOWN)
    before, after = _split_at(rest, match.start())
    return RowSplit(before, after)


def split_additional(rest: str) -> RowSplit:
    match = REC_VERB_RE.search(rest)
    if match:
        before, after = _split_at(rest, match.start())
        if len(after) >= MIN_VERB_RECOMMENDATION_CHARS:
            return RowSplit(before, after)
    return RowSplit(rest, RECOMMENDATION_UNKNOWN)


def _air_sealing(rest: str, split: RowSplit) -> RowSplit:
    phrase = AIR_SEAL_RE.search(rest)
    if not phrase:
        return split
    recommendation = collapse_spaces(rest[phrase.start() :])
    not_sealed = NOT_SEALED_RE.search(rest)
    if not_sealed:
        condition = collapse_spaces(not_sealed.group(0))
    else:
        condition = collapse_spaces(rest[: phrase.start()])
    return RowSplit(condition, recommendation)


def _air_conditioner(rest: str, split: RowSplit) -> RowSplit:
    seer = SEER_RE.search(rest)
    if not seer:
        return split
    return RowSplit(f"{seer.group(1)} SEER", split.recommendation)


def _solar_pv(rest: str, split: RowSplit) -> RowSplit:
    capacity = SOLAR_CAPACITY_RE.search(rest)
    if not capacity:
        return split
    return RowSplit(f"Capacity of {capacity.group(1)} kW in DC", split.recommendation)


ROW_OVERRIDES: dict[tuple[Section, str], Override] = {
    (PRIORITY, "Envelope/Air sealing"): _air_sealing,
    (PRIORITY, "Air Conditioner"): _air_conditioner,
    (ADDITIONAL, "Solar PV"): _solar_pv,
}

SECTION_SPLITTERS: dict[Section, Callable[[str], RowSplit]] = {
    PRIORITY: split_priority,
    ADDITIONAL: split_additional,
}


def split_row(section: Section, feature: str, rest: str) -> RowSplit:
    rest = collapse_spaces(rest)
    split = SECTION_SPLITTERS[section](rest)
    override = ROW_OVERRIDES.get((section, feature))
    if override is not None:
        split = override(rest, split)
    return RowSplit(
        todays_condition=split.todays_condition or CONDITION_UNKNOWN,
        recommendation=split.recommendation or RECOMMENDATION_UNKNOWN,
    )
