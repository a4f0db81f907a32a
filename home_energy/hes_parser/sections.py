"""Locate the priority and additional recommendation tables."""
from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .catalog import ADDITIONAL, PRIORITY, SECTIONS, Section

SECTION_HEADERS: dict[Section, re.Pattern[str]] = {
    PRIORITY: re.compile(r"^PRIORITY\s+ENERGY\s+IMPROVEMENTS", re.IGNORECASE),
    ADDITIONAL: re.compile(r"^ADDITIONAL\s+ENERGY\s+RECOMMENDATIONS", re.IGNORECASE),
}

# Numbered footnotes printed under the tables.
FOOTNOTE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d+\.\s+To achieve the", re.IGNORECASE),
    re.compile(r"^\d+\.\s+Today['’]?s Condition represents", re.IGNORECASE),
    re.compile(r"^\d+\.\s+For in this report", re.IGNORECASE),
)


@dataclass(frozen=True)
class SectionRange:
    """Half-open line range ``[start, end)``; ``start`` is the header line."""

    section: Section
    start: int
    end: int

    def slice(self, lines: Sequence[str]) -> list[str]:
        return list(lines[self.start : self.end])


def is_boilerplate(line: str) -> bool:
    return any(pattern.search(line) for pattern in FOOTNOTE_PATTERNS)


def find_section_range(
    lines: Sequence[str],
    header_re: re.Pattern[str],
    stop_headers: Iterable[re.Pattern[str]] = (),
    *,
    section: Section = PRIORITY,
) -> SectionRange | None:
    start = next((i for i, line in enumerate(lines) if header_re.search(line)), None)
    if start is None:
        return None
    stops = list(stop_headers)
    end = len(lines)
    for index in range(start + 1, len(lines)):
        line = lines[index]
        if any(stop.search(line) for stop in stops) or is_boilerplate(line):
            end = index
            break
    return SectionRange(section=section, start=start, end=end)


def locate_section(lines: Sequence[str], section: Section) -> SectionRange | None:
    others = [SECTION_HEADERS[other] for other in SECTIONS if other != section]
    return find_section_range(lines, SECTION_HEADERS[section], others, section=section)
