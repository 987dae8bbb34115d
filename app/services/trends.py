"""
Change statistics for reading histories.

Two classifications exist side by side:
    - the 24h summary on every `RiverData` compares against the reading from
      roughly a day earlier and classifies the percentage change;
    - `calculate_change` compares against a point a requested window back and
      classifies the absolute change against per-kind thresholds.
"""

from datetime import timedelta

from app.exceptions import UnsupportedWindowError
from app.models.schemas import ChangeStatus, DataPoint, ReadingKind, TimeRange, TimeRangeChange

SAMPLE_INTERVAL = timedelta(minutes=15)

RIVER_WINDOWS = {
    TimeRange.HOUR_1: timedelta(hours=1),
    TimeRange.HOURS_2: timedelta(hours=2),
    TimeRange.HOURS_6: timedelta(hours=6),
    TimeRange.HOURS_12: timedelta(hours=12),
    TimeRange.HOURS_24: timedelta(hours=24),
    TimeRange.HOURS_48: timedelta(hours=48),
    TimeRange.WEEK_1: timedelta(weeks=1),
}

# Fewest 15-minute samples needed before a window is extrapolated instead of rejected.
RIVER_MIN_SAMPLES = {
    TimeRange.HOUR_1: 2,
    TimeRange.HOURS_2: 4,
    TimeRange.HOURS_6: 12,
    TimeRange.HOURS_12: 24,
    TimeRange.HOURS_24: 48,
    TimeRange.HOURS_48: 96,
    TimeRange.WEEK_1: 192,
}

LAKE_WINDOW_DAYS = {
    TimeRange.WEEK_1: 7,
    TimeRange.WEEKS_2: 14,
    TimeRange.MONTH_1: 30,
    TimeRange.MONTHS_2: 60,
    TimeRange.MONTHS_6: 180,
}

# Ascending small/medium/large thresholds in the unit of each reading kind.
CHANGE_THRESHOLDS = {
    ReadingKind.FLOW: (0.1, 0.5, 1.0),  # m³/s
    ReadingKind.LEVEL: (5.0, 20.0, 50.0),  # cm
    ReadingKind.TEMPERATURE: (0.5, 2.0, 5.0),  # °C
}

PERCENTAGE_THRESHOLDS = (0.0, 5.0, 15.0)

_INCREASES = (ChangeStatus.SMALL_INCREASE, ChangeStatus.MEDIUM_INCREASE, ChangeStatus.LARGE_INCREASE)
_DECREASES = (ChangeStatus.SMALL_DECREASE, ChangeStatus.MEDIUM_DECREASE, ChangeStatus.LARGE_DECREASE)


def windows_for(is_lake: bool) -> list[TimeRange]:
    return list(LAKE_WINDOW_DAYS if is_lake else RIVER_WINDOWS)


def _bucket(change: float, magnitude_reached) -> ChangeStatus:
    buckets = _INCREASES if change > 0 else _DECREASES
    severity = sum(1 for reached in magnitude_reached if reached)
    return buckets[severity - 1] if severity else ChangeStatus.STABLE


def classify_percentage(percentage: float | None) -> ChangeStatus:
    """
    Classify a percentage change.

    Anything beyond 15% counts as large, beyond 5% as medium, any other
    non-zero change as small.
    """
    if percentage is None or percentage == 0:
        return ChangeStatus.STABLE
    small, medium, large = PERCENTAGE_THRESHOLDS
    magnitude = abs(percentage)
    return _bucket(percentage, (magnitude > small, magnitude > medium, magnitude > large))


def classify_change(change: float, kind: ReadingKind) -> ChangeStatus:
    """Classify an absolute change; each threshold opens its band inclusively."""
    magnitude = abs(change)
    return _bucket(change, tuple(magnitude >= threshold for threshold in CHANGE_THRESHOLDS[kind]))


def find_previous_day(history: list[DataPoint]) -> DataPoint | None:
    """Return the first point 23-25 hours older than the newest one, at about the same hour."""
    if not history:
        return None
    current = history[0]
    for point in history:
        hour_diff = abs(point.timestamp.hour - current.timestamp.hour)
        elapsed = current.timestamp - point.timestamp
        if hour_diff <= 1 and timedelta(hours=23) <= elapsed <= timedelta(hours=25):
            return point
    return None


def summarize_series(kind: ReadingKind, history: list[DataPoint]) -> tuple[DataPoint | None, float | None, ChangeStatus]:
    """
    Compare the newest point with the previous day.

    Returns ``(previous_day, change, status)``. The change is a percentage for
    level and flow and an absolute difference for temperature; the status is
    always derived from the percentage.
    """
    previous = find_previous_day(history)
    if previous is None:
        return None, None, ChangeStatus.STABLE

    current = history[0]
    if kind is ReadingKind.TEMPERATURE:
        change = current.value - previous.value
        if previous.value == 0:
            return previous, change, ChangeStatus.STABLE
        return previous, change, classify_percentage(change / previous.value * 100)

    if previous.value <= 0:
        return previous, None, ChangeStatus.STABLE
    percentage = (current.value - previous.value) / previous.value * 100
    return previous, percentage, classify_percentage(percentage)


def calculate_change(
    kind: ReadingKind,
    history: list[DataPoint],
    window: TimeRange,
    is_lake: bool = False,
) -> TimeRangeChange | None:
    """
    Change between the newest point and one roughly `window` earlier.

    River histories are 15-minute samples. When fewer samples exist than the
    window needs, the change is scaled up linearly, unless the history is too
    short to be meaningful. Lake histories are daily and never extrapolated.
    Returns None when there is not enough data.
    """
    if is_lake:
        if window not in LAKE_WINDOW_DAYS:
            raise UnsupportedWindowError(f"Window {window.value} is not available for lakes")
        if len(history) < 2:
            return None
        ideal_index = LAKE_WINDOW_DAYS[window]
        index = min(ideal_index, len(history) - 1)
        scale = 1.0
    else:
        if window not in RIVER_WINDOWS:
            raise UnsupportedWindowError(f"Window {window.value} is not available for rivers")
        ideal_index = int(RIVER_WINDOWS[window] / SAMPLE_INTERVAL)
        index = min(ideal_index, len(history) - 1)
        if index < RIVER_MIN_SAMPLES[window]:
            return None
        # Linear extrapolation; overstates change on volatile series.
        scale = ideal_index / index

    current = history[0]
    compared = history[index]
    absolute_change = (current.value - compared.value) * scale
    percent_change = absolute_change / compared.value * 100 if compared.value > 0 else None

    return TimeRangeChange(
        window=window,
        absolute_change=absolute_change,
        percent_change=percent_change,
        status=classify_change(absolute_change, kind),
        extrapolated=scale != 1.0,
        compared_with=compared.date,
    )
