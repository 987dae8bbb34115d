"""Plain-text water level report, suitable for a chat message."""

from datetime import datetime

from app.models.schemas import ChangeStatus, ReadingKind, RiverData, TimeRange, WaterLevelDataPoint
from app.services.trends import calculate_change

WEEKDAYS = ["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"]
MONTH_NAMES = [
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
]


def create_ascii_chart(history: list[WaterLevelDataPoint], width: int = 24, height: int = 5) -> str:
    """Draw the newest `width` level points as a small chart, oldest on the left."""
    if not history:
        return "No data available for chart"
    if height < 2:
        raise ValueError("Chart height must be at least 2 rows")

    data = list(reversed(history[:width]))
    levels = [point.level for point in data]
    low, high = min(levels), max(levels)

    if low == high:
        return f"Water level stable at {low:g} cm over the last {len(data)} readings\n{'─' * width}"

    span = high - low
    lines = [f"Water level trend (last {len(data)} readings):", f"{high:g} cm ┐"]
    for row in range(height):
        threshold = high - span * (row / (height - 1))
        line = "│"
        for level in levels:
            if row == height - 1 and level == low:
                line += "└"
            elif row == 0 and level == high:
                line += "┐"
            elif level >= threshold:
                line += "│"
            else:
                line += " "
        lines.append(line)
    lines.append(f"{low:g} cm └{'─' * (len(data) - 1)}┘")

    first_time = data[0].date.split(" ")[-1][:5]
    last_time = data[-1].date.split(" ")[-1][:5]
    padding = max(len(data) - len(first_time) - len(last_time), 1)
    lines.append(f"{first_time}{' ' * padding}{last_time}")
    return "\n".join(lines)


def _trend_label(status: ChangeStatus | None) -> str:
    if status is None:
        return "? Unknown"
    if status.direction > 0:
        return "↗️ Rising"
    if status.direction < 0:
        return "↘️ Falling"
    return "→ Stable"


def format_water_level_report(river: RiverData, now: datetime) -> str:
    current = river.current.level
    if current is None:
        return f"*Water Level Report*\n\n📍 *Location:* {river.location} ({river.name})\nKeine Daten verfügbar"

    levels = river.history.levels
    short_term = calculate_change(ReadingKind.LEVEL, levels, TimeRange.HOURS_6)
    daily = calculate_change(ReadingKind.LEVEL, levels, TimeRange.HOURS_24)

    daily_text = ""
    if daily is not None:
        emoji = "↗️" if daily.absolute_change > 0 else "↘️" if daily.absolute_change < 0 else "→"
        daily_text = f"\n📊 *24h Change:* {emoji} {daily.absolute_change:+.0f} cm"

    date_text = f"{WEEKDAYS[now.weekday()]}, {now.day}. {MONTH_NAMES[now.month - 1]} {now.year}"
    chart = create_ascii_chart(levels)

    return (
        f"*Water Level Report - {date_text}*\n\n"
        f"📍 *Location:* {river.location} ({river.name})\n"
        f"🕒 *Last Measurement:* {current.date}\n"
        f"💧 *Current Level:* {current.level:g} cm\n"
        f"📈 *Trend (6h):* {_trend_label(short_term.status if short_term else None)}"
        f"{daily_text}\n\n"
        f"```\n{chart}\n```"
    )
