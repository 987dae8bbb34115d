from fastapi import APIRouter, HTTPException
from app.config import get_settings
from app.services import water_data
from app.services.report import format_water_level_report

router = APIRouter()


@router.get("/{river_id}")
async def get_water_level_report(river_id: str):
    """Generate a text report with the current level, trend and a small chart."""
    river = await water_data.get_river_by_id(river_id)
    if not river:
        raise HTTPException(status_code=404, detail=f"River '{river_id}' not found")
    if river.is_lake:
        raise HTTPException(status_code=400, detail="Reports are only available for rivers")

    now = water_data.local_now(get_settings().timezone)
    return {
        "success": True,
        "message": "Water level report generated successfully",
        "data": format_water_level_report(river, now),
    }
