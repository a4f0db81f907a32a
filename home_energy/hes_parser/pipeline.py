"""End-to-end parsing of HES report text into a completed recommendation table."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .anchors import parse_by_feature_anchors
from .catalog import ADDITIONAL, PRIORITY, SECTIONS, Section, SuggestionRow, features_for
from .extract import PdfSource, extract_pdf_text, resolve_min_pdf_chars
from .fallback import parse_priority_heuristic
from .fields import (
    pick_annual_cost,
    pick_carbon_footprint,
    pick_home_profile,
    pick_score,
    pick_solar_generation_kwh,
)
from .merge import complete_suggestions, dedupe_rows
from .normalize import NormalizedReport, collapse_spaces, normalize_report
from .sections import locate_section

logger = logging.getLogger(__name__)

Logger = logging.Logger | logging.LoggerAdapter

TEXT_EXCERPT_CHARS = 4200
SAMPLE_ROW_LIMIT = 12
DISPLAY_LIST_LIMIT = 80
SUMMARY_LIMIT = 8
SOLAR_SAMPLE_CHARS = 320
MISSING_VALUE = "—"
NO_RECOMMENDATIONS = "No recommendations extracted."


class NoTextExtractedError(RuntimeError):
    """Raised when a report yields no text at all, e.g. a scanned-image PDF."""

    def __init__(self, message: str, meta: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.meta = meta or {}


@dataclass
class SuggestionParse:
    """Completed suggestions plus the counters behind them."""

    suggestions: list[SuggestionRow]
    sections_found: dict[str, bool] = field(default_factory=dict)
    rows_parsed: dict[str, int] = field(default_factory=dict)
    fallback_used: bool = False


@dataclass
class HesParseOutput:
    generated_at: str
    hes_score: int | None
    annual_energy_cost: float | None
    solar_generation_kwh: float | None
    carbon_footprint: float | None
    home_location: str | None
    year_built: int | None
    heated_floor_area_sqft: float | None
    bedrooms: int | None
    suggestions: list[SuggestionRow]
    existing_conditions: list[str]
    recommendations: list[str]
    summary: str
    debug: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "hes_score": self.hes_score,
            "annual_energy_cost": self.annual_energy_cost,
            "solar_generation_kwh": self.solar_generation_kwh,
            "carbon_footprint": self.carbon_footprint,
            "home_location": self.home_location,
            "year_built": self.year_built,
            "heated_floor_area_sqft": self.heated_floor_area_sqft,
            "bedrooms": self.bedrooms,
            "suggestions": [row.to_dict() for row in self.suggestions],
            "existing_conditions": list(self.existing_conditions),
            "recommendations": list(self.recommendations),
            "summary": self.summary,
            "debug": self.debug,
        }


def now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat()


def _section_text(lines: Sequence[str], start: int, end: int) -> str:
    return "\n".join(lines[start:end])


def parse_hes_suggestions(
    report: NormalizedReport, *, log: Logger | None = None
) -> SuggestionParse:
    """Parse both tables and complete them against the template."""

    log = log or logger
    parsed: list[SuggestionRow] = []
    sections_found: dict[str, bool] = {}
    rows_parsed: dict[str, int] = {}
    fallback_used = False

    for section in SECTIONS:
        found = locate_section(report.lines, section)
        sections_found[section] = found is not None
        if found is None:
            log.debug("section %s: header not found", section)
            rows_parsed[section] = 0
            continue
        text = _section_text(report.lines, found.start, found.end)
        rows = parse_by_feature_anchors(section, text, features_for(section))
        log.debug(
            "section %s: lines %d-%d, %d anchored row(s)", section, found.start, found.end, len(rows)
        )
        if not rows and section == PRIORITY:
            rows = parse_priority_heuristic(report.layout_lines[found.start : found.end])
            fallback_used = True
            log.debug("section %s: column fallback produced %d row(s)", section, len(rows))
        rows_parsed[section] = len(rows)
        parsed.extend(rows)

    suggestions = complete_suggestions(dedupe_rows(parsed))
    log.debug("text-table: emitted %d row(s)", len(suggestions))
    for row in suggestions[:SAMPLE_ROW_LIMIT]:
        log.debug("row: %s", row)
    return SuggestionParse(
        suggestions=suggestions,
        sections_found=sections_found,
        rows_parsed=rows_parsed,
        fallback_used=fallback_used,
    )


def display_lines(rows: Iterable[SuggestionRow], attribute: str) -> list[str]:
    lines = [
        f"{row.feature}: {getattr(row, attribute) or MISSING_VALUE}".strip() for row in rows
    ]
    return lines[:DISPLAY_LIST_LIMIT]


def summarize_suggestions(rows: Iterable[SuggestionRow]) -> str:
    entries = [
        f"{row.feature}: {row.recommendation}".strip()
        for row in rows
        if row.recommendation and row.recommendation != MISSING_VALUE
    ]
    return " • ".join(entries[:SUMMARY_LIMIT]) or NO_RECOMMENDATIONS


def _solar_sample(text: str) -> str:
    flat = collapse_spaces(text)
    index = flat.lower().find("solar generation")
    if index < 0:
        return ""
    return flat[index : index + SOLAR_SAMPLE_CHARS]


def _has_section(rows: Iterable[SuggestionRow], section: Section) -> bool:
    return any(row.section == section for row in rows)


def parse_hes_text(
    raw_text: str,
    *,
    source: dict[str, Any] | None = None,
    parser_used: str = "text",
    log: Logger | None = None,
    generated_at: str | None = None,
) -> HesParseOutput:
    """Parse extracted report text.

    Raises ``NoTextExtractedError`` when ``raw_text`` holds no text; every
    other gap in the report degrades to ``None`` or the row defaults.
    """

    log = log or logger
    report = normalize_report(raw_text)
    if not report.text:
        raise NoTextExtractedError(
            "Report has no text. This usually means the PDF is scanned images.",
            meta=source,
        )
    text = report.text
    log.debug("normalized report text: %d chars", len(text))

    profile = pick_home_profile(text)
    solar_generation_kwh = pick_solar_generation_kwh(text)
    suggestion_parse = parse_hes_suggestions(report, log=log)
    suggestions = suggestion_parse.suggestions

    debug = {
        "parser_used": parser_used,
        "text_excerpt": text[:TEXT_EXCERPT_CHARS],
        "source": source or {},
        "parsed": {
            "suggestions_count": len(suggestions),
            "has_priority": _has_section(suggestions, PRIORITY),
            "has_additional": _has_section(suggestions, ADDITIONAL),
            "priority_section_found": suggestion_parse.sections_found.get(PRIORITY, False),
            "additional_section_found": suggestion_parse.sections_found.get(ADDITIONAL, False),
            "priority_rows_parsed": suggestion_parse.rows_parsed.get(PRIORITY, 0),
            "additional_rows_parsed": suggestion_parse.rows_parsed.get(ADDITIONAL, 0),
            "fallback_used": suggestion_parse.fallback_used,
        },
        "table_debug": {
            "rows_emitted": len(suggestions),
            "sample_rows": [row.to_dict() for row in suggestions[:SAMPLE_ROW_LIMIT]],
        },
        "solar_debug": {
            "found": solar_generation_kwh is not None,
            "sample": _solar_sample(text),
        },
    }

    return HesParseOutput(
        generated_at=generated_at or now_iso(),
        hes_score=pick_score(text),
        annual_energy_cost=pick_annual_cost(text),
        solar_generation_kwh=solar_generation_kwh,
        carbon_footprint=pick_carbon_footprint(text),
        home_location=profile.location,
        year_built=profile.year_built,
        heated_floor_area_sqft=profile.heated_floor_area_sqft,
        bedrooms=profile.bedrooms,
        suggestions=suggestions,
        existing_conditions=display_lines(suggestions, "todays_condition"),
        recommendations=display_lines(suggestions, "recommendation"),
        summary=summarize_suggestions(suggestions),
        debug=debug,
    )


def parse_hes_pdf(
    source: PdfSource,
    *,
    min_chars: int | None = None,
    prefer_backends: Iterable[str] | None = None,
    log: Logger | None = None,
) -> HesParseOutput:
    """Extract text from a HES report PDF and parse it."""

    log = log or logger
    text, meta = extract_pdf_text(
        source,
        min_chars=resolve_min_pdf_chars(min_chars),
        prefer_backends=prefer_backends,
    )
    source_info: dict[str, Any] = {"pdf_meta": meta}
    if isinstance(source, (str, Path)):
        source_info["filename"] = Path(source).name
    if not text.strip():
        raise NoTextExtractedError(
            "Parsed PDF but got no text. This usually means the PDF is scanned images.",
            meta=source_info,
        )
    log.debug("pdf: extracted %d chars with %s", len(text), meta.get("backend"))
    return parse_hes_text(
        text,
        source=source_info,
        parser_used=f"pdf-{meta.get('backend', 'none')}",
        log=log,
    )
