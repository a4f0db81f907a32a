"""Dedup parsed rows and complete them against the fixed template."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from .catalog import SuggestionRow, build_template_rows
from .normalize import norm_key


def row_key(row: SuggestionRow) -> tuple[str, str]:
    return row.section, norm_key(row.feature)


def dedupe_rows(rows: Iterable[SuggestionRow]) -> list[SuggestionRow]:
    seen: set[tuple[str, str]] = set()
    result: list[SuggestionRow] = []
    for row in rows:
        key = row_key(row)
        if key in seen:
            continue
        seen.add(key)
        result.append(row)
    return result


def merge_into_template(
    template: Sequence[SuggestionRow], parsed: Iterable[SuggestionRow]
) -> list[SuggestionRow]:
    """Overlay parsed values on the template, keeping its order and length.

    Parsed rows for features outside the template are dropped.
    """

    by_key = {row_key(row): row for row in dedupe_rows(parsed)}
    merged: list[SuggestionRow] = []
    for row in template:
        hit = by_key.get(row_key(row))
        if hit is None:
            merged.append(replace(row))
            continue
        merged.append(
            replace(
                row,
                todays_condition=hit.todays_condition or row.todays_condition,
                recommendation=hit.recommendation or row.recommendation,
            )
        )
    return merged


def complete_suggestions(parsed: Iterable[SuggestionRow]) -> list[SuggestionRow]:
    return merge_into_template(build_template_rows(), parsed)
