from fastapi import APIRouter, HTTPException, Query, Response
from app.services import water_data
from app.services.trends import calculate_change, windows_for
from app.models.schemas import ReadingKind, RiverData, RiversData, TimeRange, TimeRangeChange
from app.exceptions import UnsupportedWindowError

router = APIRouter()

CACHE_HEADERS = {"Cache-Control": "public, s-maxage=900, stale-while-revalidate=1800"}
NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate", "Pragma": "no-cache", "Expires": "0"}

HISTORY_FIELDS = {
    ReadingKind.LEVEL: "levels",
    ReadingKind.FLOW: "flows",
    ReadingKind.TEMPERATURE: "temperatures",
}


async def _get_river_or_404(river_id: str) -> RiverData:
    river = await water_data.get_river_by_id(river_id)
    if not river:
        raise HTTPException(status_code=404, detail=f"River '{river_id}' not found")
    return river


@router.get("", response_model=RiversData)
async def list_rivers(response: Response):
    """Get current readings, history and change statistics for all water bodies."""
    data = await water_data.get_rivers_data()
    response.headers.update(NO_CACHE_HEADERS if data.error else CACHE_HEADERS)
    return data


@router.get("/{river_id}", response_model=RiverData)
async def get_river(river_id: str):
    """Get a single river or lake by its id."""
    return await _get_river_or_404(river_id)


@router.get("/{river_id}/windows", response_model=list[TimeRange])
async def get_river_windows(river_id: str):
    """Time windows available for change statistics of this water body."""
    river = await _get_river_or_404(river_id)
    return windows_for(river.is_lake)


@router.get("/{river_id}/change", response_model=TimeRangeChange | None)
async def get_river_change(
    river_id: str,
    kind: ReadingKind = Query(..., description="Reading kind to compare"),
    window: TimeRange = Query(..., description="How far back to compare"),
):
    """Change of one reading over the requested window; null when there is not enough history."""
    river = await _get_river_or_404(river_id)
    if river.is_lake and kind is not ReadingKind.TEMPERATURE:
        raise HTTPException(status_code=400, detail="Lakes only provide temperature readings")

    history = getattr(river.history, HISTORY_FIELDS[kind])
    try:
        return calculate_change(kind, history, window, is_lake=river.is_lake)
    except UnsupportedWindowError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
