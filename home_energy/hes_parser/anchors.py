"""Feature-anchored row parsing.

The tables have no row delimiters once the text is extracted, so rows are
recovered from where each catalog feature name occurs: consecutive anchors,
in document order, delimit each other.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .catalog import Section, SuggestionRow, feature_pattern
from .normalize import collapse_spaces, fix_joined_words
from .rows import split_row, truncate_at_other_feature

HEADER_TOKEN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bFEATURE\b", re.IGNORECASE),
    re.compile(r"\bTODAY['’]?S\s+CONDITION\b", re.IGNORECASE),
    re.compile(r"\bRECOMMENDED\s+IMPROVEMENTS\b", re.IGNORECASE),
)


@dataclass(frozen=True)
class Anchor:
    feature: str
    start: int
    end: int

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and start < self.end


@dataclass(frozen=True)
class Segment:
    feature: str
    text: str


def find_anchors(blob: str, features: Iterable[str]) -> list[Anchor]:
    """Earliest occurrence of each feature, sorted by position.

    Longer names claim their text first so that ``Wall insulation`` is not
    anchored inside ``Basement wall insulation``.
    """

    claimed: list[Anchor] = []
    for feature in sorted(features, key=len, reverse=True):
        for match in feature_pattern(feature).finditer(blob):
            if any(anchor.overlaps(match.start(), match.end()) for anchor in claimed):
                continue
            claimed.append(Anchor(feature, match.start(), match.end()))
            break
    return sorted(claimed, key=lambda anchor: anchor.start)


def slice_segments(blob: str, anchors: Sequence[Anchor]) -> list[Segment]:
    segments: list[Segment] = []
    for index, anchor in enumerate(anchors):
        stop = anchors[index + 1].start if index + 1 < len(anchors) else len(blob)
        segments.append(Segment(anchor.feature, blob[anchor.end : stop]))
    return segments


def strip_header_tokens(text: str) -> str:
    cleaned = collapse_spaces(text)
    for pattern in HEADER_TOKEN_PATTERNS:
        cleaned = pattern.sub("", cleaned, count=1)
    return collapse_spaces(cleaned)


def parse_by_feature_anchors(
    section: Section, section_text: str, features: Sequence[str]
) -> list[SuggestionRow]:
    blob = collapse_spaces(fix_joined_words(section_text))
    anchors = find_anchors(blob, features)
    rows: list[SuggestionRow] = []
    for segment in slice_segments(blob, anchors):
        rest = strip_header_tokens(segment.text)
        rest = truncate_at_other_feature(rest, segment.feature, features)
        split = split_row(section, segment.feature, rest)
        rows.append(
            SuggestionRow(
                section=section,
                feature=segment.feature,
                todays_condition=split.todays_condition,
                recommendation=split.recommendation,
            )
        )
    return rows
