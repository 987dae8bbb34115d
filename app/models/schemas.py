from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReadingKind(str, Enum):
    LEVEL = "level"
    FLOW = "flow"
    TEMPERATURE = "temperature"


class AlertLevel(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    ALERT = "alert"


class ChangeStatus(str, Enum):
    STABLE = "stable"
    SMALL_INCREASE = "small-increase"
    MEDIUM_INCREASE = "medium-increase"
    LARGE_INCREASE = "large-increase"
    SMALL_DECREASE = "small-decrease"
    MEDIUM_DECREASE = "medium-decrease"
    LARGE_DECREASE = "large-decrease"

    @property
    def direction(self) -> int:
        if self is ChangeStatus.STABLE:
            return 0
        return 1 if self.value.endswith("increase") else -1


class TimeRange(str, Enum):
    HOUR_1 = "1h"
    HOURS_2 = "2h"
    HOURS_6 = "6h"
    HOURS_12 = "12h"
    HOURS_24 = "24h"
    HOURS_48 = "48h"
    WEEK_1 = "1w"
    WEEKS_2 = "2w"
    MONTH_1 = "1m"
    MONTHS_2 = "2m"
    MONTHS_6 = "6m"


class SourceStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"
    SKIPPED = "skipped"


class WaterLevelDataPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    timestamp: datetime
    level: float
    hour: int

    @property
    def value(self) -> float:
        return self.level


class WaterTemperatureDataPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    timestamp: datetime
    temperature: float
    situation: str | None = None

    @property
    def value(self) -> float:
        return self.temperature


class WaterFlowDataPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    timestamp: datetime
    flow: float  # m³/s

    @property
    def value(self) -> float:
        return self.flow


DataPoint = WaterLevelDataPoint | WaterTemperatureDataPoint | WaterFlowDataPoint

ThresholdRange = tuple[float | None, float | None]
ThresholdRanges = ThresholdRange | list[ThresholdRange]


class Thresholds(BaseModel):
    green: ThresholdRanges
    yellow: ThresholdRanges
    red: ThresholdRanges


class CurrentReadings(BaseModel):
    level: WaterLevelDataPoint | None = None
    temperature: WaterTemperatureDataPoint | None = None
    flow: WaterFlowDataPoint | None = None


class ReadingHistory(BaseModel):
    levels: list[WaterLevelDataPoint] = Field(default_factory=list)
    temperatures: list[WaterTemperatureDataPoint] = Field(default_factory=list)
    flows: list[WaterFlowDataPoint] = Field(default_factory=list)


class ChangeSummary(BaseModel):
    level_percentage: float | None = None
    level_status: ChangeStatus | None = None
    temperature_change: float | None = None
    temperature_status: ChangeStatus | None = None
    flow_percentage: float | None = None
    flow_status: ChangeStatus | None = None


class SourceUrls(BaseModel):
    level: str | None = None
    temperature: str | None = None
    flow: str | None = None


class RiverData(BaseModel):
    id: str
    name: str
    location: str
    is_lake: bool = False
    current: CurrentReadings = Field(default_factory=CurrentReadings)
    history: ReadingHistory = Field(default_factory=ReadingHistory)
    previous_day: CurrentReadings = Field(default_factory=CurrentReadings)
    changes: ChangeSummary = Field(default_factory=ChangeSummary)
    urls: SourceUrls = Field(default_factory=SourceUrls)
    webcam_url: str | None = None
    flow_thresholds: Thresholds | None = None
    alert_level: AlertLevel = AlertLevel.NORMAL
    source_status: dict[ReadingKind, SourceStatus] = Field(default_factory=dict)


class RiversData(BaseModel):
    rivers: list[RiverData]
    last_updated: datetime
    error: str | None = None


class TimeRangeChange(BaseModel):
    window: TimeRange
    absolute_change: float
    percent_change: float | None
    status: ChangeStatus
    extrapolated: bool = False
    compared_with: str


class RiverAlert(BaseModel):
    id: str
    name: str
    location: str
    alert_level: AlertLevel
    flow: float | None
    timestamp: str | None


class AlertSummary(BaseModel):
    alert_level: AlertLevel
    count: int
    rivers: list[str]
