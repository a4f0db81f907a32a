from __future__ import annotations

from home_energy.hes_parser import anchors, catalog, fallback, merge, rows, sections
from home_energy.hes_parser.catalog import ADDITIONAL, PRIORITY, SuggestionRow
from home_energy.hes_parser.normalize import normalize_report


def test_locate_sections(sample_report: str) -> None:
    report = normalize_report(sample_report)
    priority = sections.locate_section(report.lines, PRIORITY)
    additional = sections.locate_section(report.lines, ADDITIONAL)
    assert priority is not None and additional is not None
    assert report.lines[priority.start] == "PRIORITY ENERGY IMPROVEMENTS"
    assert report.lines[priority.end].startswith("1. To achieve the")
    assert report.lines[additional.start] == "ADDITIONAL ENERGY RECOMMENDATIONS"
    assert report.lines[additional.end].startswith("2. Today's Condition represents")


def test_locate_section_missing_header_returns_none() -> None:
    lines = ["HOME ENERGY SCORE", "Air Conditioner 8.0 SEER"]
    assert sections.locate_section(lines, PRIORITY) is None


def test_section_ends_at_other_header_in_either_order() -> None:
    lines = [
        "ADDITIONAL ENERGY RECOMMENDATIONS",
        "Windows Single-pane Upgrade to ENERGY STAR",
        "PRIORITY ENERGY IMPROVEMENTS",
        "Water Heater Gas When replacing, install a heat pump",
    ]
    additional = sections.locate_section(lines, ADDITIONAL)
    priority = sections.locate_section(lines, PRIORITY)
    assert additional is not None and (additional.start, additional.end) == (0, 2)
    assert priority is not None and (priority.start, priority.end) == (2, 4)


def test_anchors_are_sorted_and_skip_nested_names() -> None:
    blob = "Basement wall insulation R-0 Insulate Wall insulation R-0 Insulate to R-13"
    found = anchors.find_anchors(blob, catalog.ADDITIONAL_FEATURES)
    assert [anchor.feature for anchor in found] == ["Basement wall insulation", "Wall insulation"]
    assert found[1].start == blob.index("Wall insulation")
    assert found[0].start < found[1].start


def test_anchor_tolerates_footnote_markers() -> None:
    blob = "Skylights² Double-pane Windows³ Single-pane Upgrade to ENERGY STAR"
    found = anchors.find_anchors(blob, catalog.ADDITIONAL_FEATURES)
    assert [anchor.feature for anchor in found] == ["Skylights", "Windows"]
    segments = anchors.slice_segments(blob, found)
    assert segments[0].text.strip() == "Double-pane"
    assert segments[1].text.strip() == "Single-pane Upgrade to ENERGY STAR"


def test_anchor_parser_without_matches_returns_nothing() -> None:
    assert anchors.parse_by_feature_anchors(PRIORITY, "nothing here", catalog.PRIORITY_FEATURES) == []


def test_priority_split_for_air_conditioner() -> None:
    split = rows.split_row(
        PRIORITY, "Air Conditioner", "8.0 SEER When replacing, install a 16 SEER unit"
    )
    assert split.todays_condition == "8.0 SEER"
    assert split.recommendation.startswith("When replacing")
    assert split.recommendation == "When replacing, install a 16 SEER unit"


def test_air_sealing_override() -> None:
    split = rows.split_row(
        PRIORITY,
        "Envelope/Air sealing",
        "Not professionally air sealed Professionally air seal to reduce drafts",
    )
    assert split.todays_condition == "Not professionally air sealed"
    assert split.recommendation == "Professionally air seal to reduce drafts"


def test_additional_split_requires_long_enough_recommendation() -> None:
    split = rows.split_row(ADDITIONAL, "Windows", "Single-pane Upgrade to ENERGY STAR")
    assert split.todays_condition == "Single-pane"
    assert split.recommendation == "Upgrade to ENERGY STAR"
    short = rows.split_row(ADDITIONAL, "Duct sealing", "Leaky, seal")
    assert short.todays_condition == "Leaky, seal"
    assert short.recommendation == ""


def test_solar_pv_capacity_override() -> None:
    split = rows.split_row(
        ADDITIONAL, "Solar PV", "Capacity of 5.4 k W in DC Install a solar electric system"
    )
    assert split.todays_condition == "Capacity of 5.4 kW in DC"
    assert split.recommendation == "Install a solar electric system"


def test_split_defaults() -> None:
    empty = rows.split_row(PRIORITY, "Water Heater", "")
    assert (empty.todays_condition, empty.recommendation) == ("N/A", "")
    plain = rows.split_row(PRIORITY, "Heating equipment", "Gas furnace 80% AFUE")
    assert (plain.todays_condition, plain.recommendation) == ("Gas furnace 80% AFUE", "")


def test_bleed_guard_truncates_at_other_feature() -> None:
    rest = "Double-pane, clear Wall insulation Uninsulated"
    cut = rows.truncate_at_other_feature(rest, "Skylights", catalog.ADDITIONAL_FEATURES)
    assert cut == "Double-pane, clear"
    same = rows.truncate_at_other_feature(
        "Single-pane Upgrade windows", "Windows", catalog.ADDITIONAL_FEATURES
    )
    assert same == "Single-pane Upgrade windows"


def test_anchor_parser_prevents_bleed() -> None:
    text = (
        "ADDITIONAL ENERGY RECOMMENDATIONS\n"
        "Skylights Double-pane, clear Wall insulation Uninsulated Insulate to R-13"
    )
    parsed = anchors.parse_by_feature_anchors(ADDITIONAL, text, catalog.ADDITIONAL_FEATURES)
    by_feature = {row.feature: row for row in parsed}
    assert "wall insulation" not in by_feature["Skylights"].todays_condition.lower()
    assert by_feature["Skylights"].todays_condition == "Double-pane, clear"
    assert by_feature["Wall insulation"].recommendation == "Insulate to R-13"


def test_fallback_parses_column_layout() -> None:
    layout = [
        "PRIORITY ENERGY IMPROVEMENTS",
        "FEATURE          TODAY'S CONDITION          RECOMMENDED IMPROVEMENTS",
        "Air-Conditioner     8.0 SEER     When replacing, install 16 SEER",
        "hot water tank     Gas storage",
        "x",
    ]
    parsed = fallback.parse_priority_heuristic(layout)
    assert [row.feature for row in parsed] == ["Air-Conditioner", "Hot Water Tank"]
    assert parsed[0].todays_condition == "8.0 SEER"
    assert parsed[0].recommendation == "When replacing, install 16 SEER"
    assert parsed[1].recommendation == ""


def test_merge_fills_template_and_drops_unknown_features() -> None:
    parsed = [
        SuggestionRow(PRIORITY, "AIR CONDITIONER", "10 SEER", "Upgrade"),
        SuggestionRow(PRIORITY, "air conditioner", "duplicate", "ignored"),
        SuggestionRow(PRIORITY, "Heat Pump", "ignored", "ignored"),
        SuggestionRow(ADDITIONAL, "Windows", "", "Upgrade to ENERGY STAR"),
    ]
    merged = merge.complete_suggestions(parsed)
    assert len(merged) == catalog.template_size() == 16
    assert [(row.section, row.feature) for row in merged] == [
        (row.section, row.feature) for row in catalog.build_template_rows()
    ]
    by_feature = {row.feature: row for row in merged}
    assert by_feature["Air Conditioner"].todays_condition == "10 SEER"
    assert by_feature["Windows"].todays_condition == "N/A"
    assert by_feature["Windows"].recommendation == "Upgrade to ENERGY STAR"
    assert len({merge.row_key(row) for row in merged}) == len(merged)


def test_template_rows_are_fresh_copies() -> None:
    first = catalog.build_template_rows()
    first[0].todays_condition = "changed"
    assert catalog.build_template_rows()[0].todays_condition == "N/A"
