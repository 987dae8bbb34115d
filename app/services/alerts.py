from app.models.schemas import AlertLevel, ThresholdRange, ThresholdRanges, Thresholds


def is_within_single_range(value: float, bounds: ThresholdRange) -> bool:
    low, high = bounds
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def is_within_range(value: float, ranges: ThresholdRanges) -> bool:
    """Check `value` against one inclusive range or any of several."""
    if isinstance(ranges, list):
        return any(is_within_single_range(value, bounds) for bounds in ranges)
    return is_within_single_range(value, ranges)


def get_alert_level_from_flow(flow: float, thresholds: Thresholds) -> AlertLevel:
    if is_within_range(flow, thresholds.red):
        return AlertLevel.ALERT
    if is_within_range(flow, thresholds.yellow):
        return AlertLevel.WARNING
    if is_within_range(flow, thresholds.green):
        return AlertLevel.NORMAL
    return AlertLevel.NORMAL
