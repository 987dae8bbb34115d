"""
Common interface for the upstream page parsers.

Every parser turns raw upstream HTML into a newest-first list of data points
for one reading kind. The orchestrator wraps the result in a `SeriesOutcome`
so callers can tell an empty page from an unreachable one.
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.models.schemas import DataPoint, ReadingKind, SourceStatus


@dataclass(frozen=True)
class SeriesOutcome:
    status: SourceStatus
    history: list[DataPoint] = field(default_factory=list)
    error: str | None = None

    @property
    def current(self) -> DataPoint | None:
        return self.history[0] if self.history else None

    @classmethod
    def from_history(cls, history: list[DataPoint]) -> "SeriesOutcome":
        if not history:
            return cls(SourceStatus.EMPTY)
        return cls(SourceStatus.OK, history)

    @classmethod
    def failed(cls, error: str) -> "SeriesOutcome":
        return cls(SourceStatus.FAILED, error=error)

    @classmethod
    def skipped(cls) -> "SeriesOutcome":
        return cls(SourceStatus.SKIPPED)


class SeriesParser:
    """Strategy that produces a normalized series from an upstream page."""

    name = "base"

    def parse(self, html: str, kind: ReadingKind, now: datetime) -> list[DataPoint]:
        raise NotImplementedError
