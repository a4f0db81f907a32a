"""Home Energy Score report parser package."""
from __future__ import annotations

from . import anchors, catalog, extract, fallback, fields, merge, normalize, pipeline, rows, sections
from .catalog import SuggestionRow
from .pipeline import HesParseOutput, NoTextExtractedError, parse_hes_pdf, parse_hes_text

__all__ = [
    "anchors",
    "catalog",
    "extract",
    "fallback",
    "fields",
    "merge",
    "normalize",
    "pipeline",
    "rows",
    "sections",
    "HesParseOutput",
    "NoTextExtractedError",
    "SuggestionRow",
    "parse_hes_pdf",
    "parse_hes_text",
]
