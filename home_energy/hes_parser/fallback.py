"""Column-based parser for priority tables that anchor matching missed."""
from __future__ import annotations

import re
from collections.abc import Sequence

from .catalog import CONDITION_UNKNOWN, PRIORITY, SuggestionRow
from .normalize import collapse_spaces, fix_joined_words, repair_line, to_title
from .sections import SECTION_HEADERS, is_boilerplate

COLUMN_GAP_RE = re.compile(r"\s{2,}")
COLUMN_HEADER_RE = re.compile(r"^FEATURE\b", re.IGNORECASE)
MIN_FEATURE_CHARS = 3


def _is_section_header(line: str) -> bool:
    return any(pattern.search(line) for pattern in SECTION_HEADERS.values())


def split_columns(layout_line: str) -> list[str]:
    parts = COLUMN_GAP_RE.split(layout_line.strip())
    return [collapse_spaces(fix_joined_words(part)) for part in parts if part.strip()]


def parse_priority_heuristic(layout_lines: Sequence[str]) -> list[SuggestionRow]:
    """Parse ``feature  condition  recommendation`` lines split by wide gaps.

    ``layout_lines`` must keep the column spacing of the extracted text.
    """

    repaired = [repair_line(line) for line in layout_lines]
    start = 0
    for index, line in enumerate(repaired):
        if COLUMN_HEADER_RE.search(line):
            start = index + 1
            break

    rows: list[SuggestionRow] = []
    for layout_line, line in zip(layout_lines[start:], repaired[start:]):
        if not line:
            continue
        if is_boilerplate(line):
            break
        if _is_section_header(line) or COLUMN_HEADER_RE.search(line):
            continue
        parts = split_columns(layout_line)
        if not parts:
            continue
        feature = to_title(parts[0])
        if len(feature) < MIN_FEATURE_CHARS:
            continue
        rows.append(
            SuggestionRow(
                section=PRIORITY,
                feature=feature,
                todays_condition=parts[1] if len(parts) > 1 else CONDITION_UNKNOWN,
                recommendation=" ".join(parts[2:]).strip(),
            )
        )
    return rows
