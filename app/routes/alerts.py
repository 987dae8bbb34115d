from fastapi import APIRouter
from app.services import water_data
from app.models.schemas import AlertLevel, AlertSummary, RiverAlert

router = APIRouter()


@router.get("", response_model=list[RiverAlert])
async def get_active_alerts():
    """Get all rivers whose current flow is in the warning or alert band."""
    data = await water_data.get_rivers_data()
    alerts = []

    for river in data.rivers:
        if river.alert_level in (AlertLevel.WARNING, AlertLevel.ALERT):
            flow = river.current.flow
            alerts.append(
                RiverAlert(
                    id=river.id,
                    name=river.name,
                    location=river.location,
                    alert_level=river.alert_level,
                    flow=flow.flow if flow else None,
                    timestamp=flow.date if flow else None,
                )
            )

    # Sort by severity: alert > warning
    severity_order = {AlertLevel.ALERT: 0, AlertLevel.WARNING: 1}
    alerts.sort(key=lambda x: severity_order.get(x.alert_level, 99))

    return alerts


@router.get("/summary", response_model=list[AlertSummary])
async def get_alert_summary():
    """Get a count of water bodies per alert level."""
    data = await water_data.get_rivers_data()

    counts: dict[AlertLevel, list[str]] = {level: [] for level in (AlertLevel.ALERT, AlertLevel.WARNING, AlertLevel.NORMAL)}
    for river in data.rivers:
        counts[river.alert_level].append(river.name)

    return [
        AlertSummary(alert_level=level, count=len(names), rivers=names)
        for level, names in counts.items()
        if len(names) > 0
    ]
