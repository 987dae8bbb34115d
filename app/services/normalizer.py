"""Parsing of German-formatted dates and decimals published by the gauge pages."""

import math
import re
from datetime import datetime

from app.models.schemas import (
    DataPoint,
    ReadingKind,
    WaterFlowDataPoint,
    WaterLevelDataPoint,
    WaterTemperatureDataPoint,
)

DATETIME_FORMAT = "%d.%m.%Y %H:%M"

_DATE_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})(?:\s+(\d{1,2}):(\d{2}))?$")
_COMMA_NUMBER_RE = re.compile(r"^[+-]?\d+(?:\.\d{3})*(?:,\d+)?")
_POINT_NUMBER_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?")


def parse_german_date(value: str) -> datetime:
    """Parse 'DD.MM.YYYY[ HH:MM]' into a naive local datetime; time defaults to 00:00."""
    match = _DATE_RE.match(" ".join(value.split()))
    if not match:
        raise ValueError(f"Unrecognised date: {value!r}")
    day, month, year, hour, minute = match.groups()
    return datetime(int(year), int(month), int(day), int(hour or 0), int(minute or 0))


def format_german_date(timestamp: datetime) -> str:
    return timestamp.strftime(DATETIME_FORMAT)


def parse_decimal(value: str) -> float:
    """
    Convert a German decimal string ("12,5", "1.234,5") into a float.

    Only the leading numeric token is read, so trailing units are ignored.
    Malformed input yields NaN; callers skip such records.
    """
    text = value.strip().replace("\xa0", "").replace(" ", "")
    if "," in text:
        match = _COMMA_NUMBER_RE.match(text)
        if not match:
            return math.nan
        return float(match.group(0).replace(".", "").replace(",", "."))
    match = _POINT_NUMBER_RE.match(text)
    if not match:
        return math.nan
    return float(match.group(0))


def make_point(
    kind: ReadingKind,
    date_text: str,
    value: float,
    situation: str | None = None,
) -> DataPoint:
    """Build the data point type for `kind`; the timestamp is always derived from `date_text`."""
    timestamp = parse_german_date(date_text)
    if kind is ReadingKind.LEVEL:
        return WaterLevelDataPoint(date=date_text, timestamp=timestamp, level=value, hour=timestamp.hour)
    if kind is ReadingKind.FLOW:
        return WaterFlowDataPoint(date=date_text, timestamp=timestamp, flow=value)
    return WaterTemperatureDataPoint(
        date=date_text,
        timestamp=timestamp,
        temperature=value,
        situation=situation or None,
    )
