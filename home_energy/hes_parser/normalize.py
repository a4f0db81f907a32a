"""Normalization helpers for extracted report text."""
from __future__ import annotations

import re
from dataclasses import dataclass

_TRAILING_WS_RE = re.compile(r"[ \t]+\n")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_INLINE_WS_RE = re.compile(r"[ \t]+")
_ANY_WS_RE = re.compile(r"\s+")

# Word boundaries lost during text extraction.
_LOWER_UPPER_RE = re.compile(r"([a-z])([A-Z])")
_CAPS_RUN_RE = re.compile(r"([A-Z]{2,})([A-Z][a-z])")
_DIGIT_LETTER_RE = re.compile(r"(\d)([A-Za-z])")
_LETTER_DIGIT_RE = re.compile(r"([A-Za-z])(\d)")
_MULTI_WS_RE = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class NormalizedReport:
    """Normalized report text with two index-aligned line views."""

    text: str
    lines: tuple[str, ...]
    layout_lines: tuple[str, ...]


def normalize_text(raw: str) -> str:
    text = (raw or "").replace("\r", "\n")
    text = _TRAILING_WS_RE.sub("\n", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


def norm_line(line: str) -> str:
    return _INLINE_WS_RE.sub(" ", line or "").strip()


def collapse_spaces(value: str) -> str:
    return _ANY_WS_RE.sub(" ", value or "").strip()


def fix_joined_words(line: str) -> str:
    """Re-insert spaces the extractor dropped.

    ``"Attic insulationCeiling"`` becomes ``"Attic insulation Ceiling"``,
    ``"8.0 SEERWhen"`` becomes ``"8.0 SEER When"`` and ``"R-30Insulate"``
    becomes ``"R-30 Insulate"``. Applying it twice is the same as once.
    """

    fixed = _LOWER_UPPER_RE.sub(r"\1 \2", line or "")
    fixed = _CAPS_RUN_RE.sub(r"\1 \2", fixed)
    fixed = _DIGIT_LETTER_RE.sub(r"\1 \2", fixed)
    fixed = _LETTER_DIGIT_RE.sub(r"\1 \2", fixed)
    fixed = _MULTI_WS_RE.sub(" ", fixed)
    return fixed.strip()


def repair_line(line: str) -> str:
    return fix_joined_words(norm_line(line))


def normalize_report(raw: str) -> NormalizedReport:
    base = normalize_text(raw)
    layout_lines = tuple(base.split("\n")) if base else ()
    lines = tuple(repair_line(line) for line in layout_lines)
    text = normalize_text("\n".join(lines))
    return NormalizedReport(text=text, lines=lines, layout_lines=layout_lines)


def normalize_report_text(raw: str) -> str:
    return normalize_report(raw).text


def norm_key(value: str) -> str:
    """Matching key for feature names: case, apostrophes and punctuation drift."""

    key = collapse_spaces(value).lower()
    key = re.sub(r"[’']", "", key)
    key = re.sub(r"[^a-z0-9/ ]+", " ", key)
    return collapse_spaces(key)


def to_title(value: str) -> str:
    text = (value or "").replace("_", " ").strip()
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), text)
