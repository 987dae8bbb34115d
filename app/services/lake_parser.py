"""
Parser for the lake temperature page, which publishes its data three ways:

    - a chart data array of ``[dayOfYear, temperature]`` pairs in an inline script,
    - a table of ``[short month/day, temperature]`` rows,
    - a sentence with the live value ("Der aktuelle Wert beträgt 14,2 Grad").

All three are read independently and merged into one daily series.
"""

import logging
import math
import re
from datetime import date, datetime, time, timedelta

from bs4 import BeautifulSoup

from app.exceptions import SourceParseError
from app.models.schemas import DataPoint, ReadingKind
from app.services.normalizer import format_german_date, make_point, parse_decimal, parse_german_date
from app.services.parsers import SeriesParser
from app.services.table_parser import select_rows

logger = logging.getLogger(__name__)

MONTHS = {
    "jan": 1, "feb": 2, "mär": 3, "mrz": 3, "mar": 3, "apr": 4,
    "mai": 5, "may": 5, "jun": 6, "jul": 7, "aug": 8, "sep": 9,
    "okt": 10, "oct": 10, "nov": 11, "dez": 12, "dec": 12,
}

# Daily lake values carry no time of day; they are pinned to local noon.
NOON = time(12, 0)

_CHART_DATA_RE = re.compile(r"""["']?data["']?\s*:\s*(\[\s*\[.*?\]\s*\])""", re.DOTALL)
_CHART_PAIR_RE = re.compile(r"\[\s*(\d{1,3})(?:\.\d+)?\s*,\s*(-?\d+(?:\.\d+)?)\s*\]")
_CURRENT_VALUE_RE = re.compile(r"aktuelle\s+Wert\s+beträgt\s*(-?\d+(?:[.,]\d+)?)\s*Grad", re.IGNORECASE)
_NUMERIC_DAY_MONTH_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.?$")
_DAY_MONTH_RE = re.compile(r"(\d{1,2})\.?\s*([A-Za-zÄÖÜäöü]{3})")
_MONTH_DAY_RE = re.compile(r"([A-Za-zÄÖÜäöü]{3})[A-Za-zäöü]*\.?\s*(\d{1,2})")


def day_of_year_to_date(day_of_year: int, reference_year: int) -> date:
    """Day 1 is January 1 of `reference_year`; later offsets roll into the next year."""
    return date(reference_year, 1, 1) + timedelta(days=day_of_year - 1)


def _daily_point(day: date, value: float) -> DataPoint:
    return make_point(ReadingKind.TEMPERATURE, format_german_date(datetime.combine(day, NOON)), value)


def parse_chart_series(html: str, reference_year: int) -> list[DataPoint]:
    pairs = []
    match = _CHART_DATA_RE.search(html)
    if match:
        pairs = _CHART_PAIR_RE.findall(match.group(1))
    if not pairs:
        logger.debug("Chart data array not found, falling back to loose bracket pairs")
        pairs = _CHART_PAIR_RE.findall(html)

    points = []
    for raw_day, raw_value in pairs:
        day_of_year = int(raw_day)
        if not 1 <= day_of_year <= 366:
            continue
        try:
            day = day_of_year_to_date(day_of_year, reference_year)
        except OverflowError:
            continue
        points.append(_daily_point(day, float(raw_value)))
    return points


def parse_month_day(text: str, today: date) -> date:
    """
    Resolve a short table date ("17. Okt", "Okt 17", "17.10.") to a calendar date.

    The year is the current one unless that would put the day in the future,
    in which case the previous year is used.
    """
    text = " ".join(text.split())
    try:
        return parse_german_date(text).date()
    except ValueError:
        pass

    match = _NUMERIC_DAY_MONTH_RE.match(text)
    if match:
        day, month = int(match.group(1)), int(match.group(2))
    else:
        match = _DAY_MONTH_RE.search(text)
        if match:
            day, month_name = int(match.group(1)), match.group(2)
        else:
            match = _MONTH_DAY_RE.search(text)
            if not match:
                raise ValueError(f"Unrecognised table date: {text!r}")
            month_name, day = match.group(1), int(match.group(2))
        month = MONTHS.get(month_name.lower())
        if month is None:
            raise ValueError(f"Unknown month abbreviation: {month_name!r}")

    candidate = date(today.year, month, day)
    if candidate > today:
        candidate = date(today.year - 1, month, day)
    return candidate


def parse_table_series(soup: BeautifulSoup, today: date) -> list[DataPoint]:
    """Table rows are newest first; the first row seen for a date is kept."""
    points: dict[date, DataPoint] = {}
    for row in select_rows(soup):
        cells = row.find_all("td")
        value_cell = row.find("td", class_="center")
        if value_cell is None:
            if len(cells) < 2:
                continue
            value_cell = cells[1]
        value = parse_decimal(value_cell.get_text(strip=True))
        if math.isnan(value):
            continue
        try:
            day = parse_month_day(cells[0].get_text(" ", strip=True), today)
        except ValueError:
            continue
        points.setdefault(day, _daily_point(day, value))
    return list(points.values())


def parse_current_value(soup: BeautifulSoup) -> float | None:
    text = " ".join(soup.get_text(" ").split())
    match = _CURRENT_VALUE_RE.search(text)
    if not match:
        return None
    value = parse_decimal(match.group(1))
    return None if math.isnan(value) else value


def merge_daily_series(*series: list[DataPoint]) -> list[DataPoint]:
    """
    Merge series keyed by calendar date, newest first.

    Later series win for a date that appears more than once.
    """
    merged: dict[date, DataPoint] = {}
    for points in series:
        for point in points:
            merged[point.timestamp.date()] = point
    return sorted(merged.values(), key=lambda point: point.timestamp, reverse=True)


class LakeParser(SeriesParser):
    name = "lake"

    def __init__(self, reference_year: int | None = None):
        self.reference_year = reference_year

    def parse(self, html: str, kind: ReadingKind, now: datetime) -> list[DataPoint]:
        if kind is not ReadingKind.TEMPERATURE:
            raise SourceParseError(f"Lake pages only publish temperature, not {kind.value}")

        today = now.date()
        reference_year = self.reference_year or now.year
        soup = BeautifulSoup(html, "html.parser")

        chart_points = parse_chart_series(html, reference_year)
        table_points = parse_table_series(soup, today)
        current_value = parse_current_value(soup)
        logger.debug(
            "Lake sources: chart=%s table=%s current=%s",
            len(chart_points),
            len(table_points),
            current_value,
        )

        # The table is more authoritative than the chart for the same day.
        history = [
            point
            for point in merge_daily_series(chart_points, table_points)
            if point.timestamp.date() <= today
        ]

        if current_value is not None:
            history = merge_daily_series(history, [_daily_point(today, current_value)])
        return history
