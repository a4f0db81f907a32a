"""Scalar field pickers for HES report text.

Every picker works on the full normalized text, is independent of the others
and returns ``None`` when nothing plausible is found.
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass

from .normalize import collapse_spaces, repair_line

Number = int | float

SCORE_OUT_OF_RE = re.compile(r"THIS\s+HOME['’]?S\s+SCORE\s+(\d{1,2})\s*OUT\s+OF\s+10", re.IGNORECASE)
SCORE_TODAY_RE = re.compile(r"SCORE\s*today:\s*(\d{1,2})", re.IGNORECASE)

COST_FRONT_RE = re.compile(
    r"ESTIMATED\s+ENERGY\s+COSTS[^$]{0,80}\$([\d,]+)\s+PER\s+YEAR", re.IGNORECASE
)
COST_TOTAL_RE = re.compile(r"TOTAL\s+ENERGY\s+COSTS\s+PER\s+YEAR[:\s]+\$?([\d,]+)", re.IGNORECASE)
COST_TOTAL_LOOSE_RE = re.compile(
    r"TOTAL\s+ENERGY\s+COSTS\s+PER\s+YEAR[^$]{0,60}\$([\d,]+)", re.IGNORECASE
)

SPLIT_KWH_RE = re.compile(r"k\s+Wh", re.IGNORECASE)
SOLAR_GENERATION_RE = re.compile(r"solar\s*generation[^0-9]{0,80}([\d,]+)\s*kWh", re.IGNORECASE)
SOLAR_HOW_MUCH_RE = re.compile(
    r"how\s*much\s*solar\s*energy[^0-9]{0,80}([\d,]+)\s*kWh", re.IGNORECASE
)
SOLAR_MIN_KWH = 100

CARBON_ANCHOR_RE = re.compile(r"THIS\s+HOME['’]?S\s+CARBON\s+FOOTPRINT", re.IGNORECASE)
CARBON_THIS_HOME_RE = re.compile(r"(\d+(?:\.\d+)?)\s*This\s+Home", re.IGNORECASE)
CARBON_AFTER_LABEL_RE = re.compile(r"CARBON\s+FOOTPRINT[^0-9]{0,60}(\d+(?:\.\d+)?)", re.IGNORECASE)
CARBON_WINDOW_LINES = 60
CARBON_MAX_TONS = 50

LOCATION_RE = re.compile(r"^LOCATION\b\s*:?\s*", re.IGNORECASE)
LOCATION_STOP_RE = re.compile(
    r"^(YEAR\s+BUILT|HEATED\s+FLOOR\s*AREA|NUMBER\s+OF\s+BEDROOMS|ASSESSMENT|ASSESSOR)\b",
    re.IGNORECASE,
)
LOCATION_MAX_EXTRA_LINES = 3
YEAR_BUILT_RE = re.compile(r"^YEAR\s+BUILT\b", re.IGNORECASE)
FLOOR_AREA_RE = re.compile(r"^HEATED\s+FLOOR\s*AREA\b", re.IGNORECASE)
SQ_FT_RE = re.compile(r"sq\.?\s*ft\.?", re.IGNORECASE)
BEDROOMS_RE = re.compile(r"^NUMBER\s+OF\s+BEDROOMS\b", re.IGNORECASE)


@dataclass
class HomeProfile:
    location: str | None = None
    year_built: Number | None = None
    heated_floor_area_sqft: Number | None = None
    bedrooms: Number | None = None

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def clean_num(value: str) -> Number | None:
    """Parse a number out of ``value`` ignoring separators, units and symbols."""

    digits = re.sub(r"[^\d.]+", "", value or "")
    try:
        number = float(digits)
    except ValueError:
        return None
    if number.is_integer():
        return int(number)
    return number


def _flatten(text: str) -> str:
    return re.sub(r"\s+", " ", text or "")


def _in_range(number: Number | None, low: Number, high: Number) -> bool:
    return number is not None and low <= number <= high


def pick_score(text: str) -> int | None:
    flat = _flatten(text)
    for pattern in (SCORE_OUT_OF_RE, SCORE_TODAY_RE):
        match = pattern.search(flat)
        if not match:
            continue
        number = clean_num(match.group(1))
        if _in_range(number, 1, 10):
            return int(number)
    return None


def pick_annual_cost(text: str) -> Number | None:
    flat = _flatten(text)
    for pattern in (COST_FRONT_RE, COST_TOTAL_RE, COST_TOTAL_LOOSE_RE):
        match = pattern.search(flat)
        if match:
            return clean_num(match.group(1))
    return None


def pick_solar_generation_kwh(text: str) -> Number | None:
    flat = _flatten(SPLIT_KWH_RE.sub("kWh", text or ""))
    match = SOLAR_GENERATION_RE.search(flat) or SOLAR_HOW_MUCH_RE.search(flat)
    if not match:
        return None
    number = clean_num(match.group(1))
    if number is not None and number > SOLAR_MIN_KWH:
        return number
    return None


def pick_carbon_footprint(text: str) -> Number | None:
    lines = [repair_line(line) for line in (text or "").split("\n")]
    start = next(
        (index for index, line in enumerate(lines) if CARBON_ANCHOR_RE.search(line)), None
    )
    if start is None:
        window = _flatten(text)
    else:
        window = " ".join(lines[start : start + CARBON_WINDOW_LINES])
    for pattern in (CARBON_THIS_HOME_RE, CARBON_AFTER_LABEL_RE):
        match = pattern.search(window)
        if not match:
            continue
        number = clean_num(match.group(1))
        if _in_range(number, 0, CARBON_MAX_TONS):
            return number
    return None


def _value_after(lines: list[str], label_re: re.Pattern[str]) -> str | None:
    index = next((i for i, line in enumerate(lines) if label_re.search(line)), None)
    if index is None:
        return None
    same_line = label_re.sub("", lines[index], count=1)
    same_line = re.sub(r"^:\s*", "", same_line.strip()).strip()
    if same_line:
        return same_line
    if index + 1 < len(lines):
        return lines[index + 1]
    return None


def _pick_location(lines: list[str]) -> str | None:
    index = next((i for i, line in enumerate(lines) if LOCATION_RE.match(line)), None)
    if index is None:
        return None
    taken: list[str] = []
    same_line = LOCATION_RE.sub("", lines[index], count=1).strip()
    if same_line:
        taken.append(same_line)
    for line in lines[index + 1 : index + 1 + LOCATION_MAX_EXTRA_LINES]:
        if LOCATION_STOP_RE.match(line):
            break
        taken.append(line)
    location = ", ".join(taken)
    location = re.sub(r",\s*,", ",", location)
    location = collapse_spaces(location)
    return location or None


def _positive(raw: str | None) -> Number | None:
    if not raw:
        return None
    number = clean_num(raw)
    if number is not None and number > 0:
        return number
    return None


def pick_home_profile(text: str) -> HomeProfile:
    lines = [repair_line(line) for line in (text or "").split("\n")]
    lines = [line for line in lines if line]
    floor_area_raw = _value_after(lines, FLOOR_AREA_RE)
    if floor_area_raw:
        floor_area_raw = SQ_FT_RE.sub("", floor_area_raw, count=1).strip()
    return HomeProfile(
        location=_pick_location(lines),
        year_built=_positive(_value_after(lines, YEAR_BUILT_RE)),
        heated_floor_area_sqft=_positive(floor_area_raw),
        bedrooms=_positive(_value_after(lines, BEDROOMS_RE)),
    )
