import asyncio
import logging
import re
from datetime import datetime
from functools import wraps
from zoneinfo import ZoneInfo

import httpx
from cachetools import TTLCache

from app.config import Settings, WaterBodyConfig, get_settings
from app.exceptions import UpstreamFetchError, WaterDataError
from app.models.schemas import (
    AlertLevel,
    ChangeSummary,
    CurrentReadings,
    ReadingHistory,
    ReadingKind,
    RiverData,
    RiversData,
    SourceStatus,
    SourceUrls,
)
from app.services.alerts import get_alert_level_from_flow
from app.services.lake_parser import LakeParser
from app.services.parsers import SeriesOutcome, SeriesParser
from app.services.table_parser import TableParser
from app.services.trends import summarize_series

logger = logging.getLogger(__name__)

_cache: TTLCache | None = None


def get_cache() -> TTLCache:
    """Response cache sized to the upstream publishing interval (15 minutes by default)."""
    global _cache
    if _cache is None:
        _cache = TTLCache(maxsize=16, ttl=get_settings().cache_ttl_seconds)
    return _cache


def cached(key_func, skip=lambda result: False):
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            cache = get_cache()
            key = key_func(*args, **kwargs)
            if key in cache:
                return cache[key]
            result = await func(*args, **kwargs)
            if not skip(result):
                cache[key] = result
            return result
        return wrapper
    return decorator


def request_headers(settings: Settings) -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Cache-Control": "no-cache, no-store, must-revalidate",
        "Pragma": "no-cache",
        "Expires": "0",
    }


def local_now(tz_name: str) -> datetime:
    """Wall-clock time at the gauges; upstream dates carry no offset."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def slugify(text: str) -> str:
    return re.sub(r"\s+", "-", text.strip().lower())


def extract_river_id(url: str) -> str:
    """Pull 'feldolling-18204006' out of '.../pegel/inn/feldolling-18204006/tabelle?...'."""
    parts = url.split("?")[0].rstrip("/").split("/")
    if "tabelle" in parts:
        index = parts.index("tabelle") - 1
        if index > 0:
            return parts[index]
    for part in parts:
        if "-" in part and re.search(r"\d+$", part):
            return part
    return "unknown"


def river_id(body: WaterBodyConfig) -> str:
    if body.is_lake:
        return f"lake-{slugify(body.name)}"
    if body.level_url:
        extracted = extract_river_id(body.level_url)
        if extracted != "unknown":
            return extracted
    return f"river-{slugify(body.name)}-{slugify(body.location)}"


def parser_for(body: WaterBodyConfig, kind: ReadingKind) -> SeriesParser:
    if kind is ReadingKind.TEMPERATURE and body.temperature_parser == LakeParser.name:
        return LakeParser(reference_year=body.chart_reference_year)
    return TableParser()


async def fetch_html(client: httpx.AsyncClient, url: str) -> str:
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise UpstreamFetchError(f"Request timeout for {url}", url) from exc
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        raise UpstreamFetchError(f"HTTP error {status_code} for {url}", url, status_code) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise UpstreamFetchError(f"Network error for {url}: {exc}", url) from exc
    return response.text


async def fetch_series(
    client: httpx.AsyncClient,
    url: str | None,
    kind: ReadingKind,
    parser: SeriesParser,
    now: datetime,
) -> SeriesOutcome:
    """Fetch and parse one reading; transport and parse failures degrade to an outcome."""
    if not url:
        return SeriesOutcome.skipped()
    try:
        html = await fetch_html(client, url)
        history = parser.parse(html, kind, now)
    except WaterDataError as exc:
        logger.error("Failed to fetch %s data from %s: %s", kind.value, url, exc)
        return SeriesOutcome.failed(str(exc))

    outcome = SeriesOutcome.from_history(history)
    if outcome.status is SourceStatus.EMPTY:
        logger.warning("No %s data found for URL: %s", kind.value, url)
    return outcome


def empty_river_data(body: WaterBodyConfig) -> RiverData:
    return RiverData(
        id=river_id(body),
        name=body.name,
        location=body.location,
        is_lake=body.is_lake,
        urls=SourceUrls(level=body.level_url, temperature=body.temperature_url, flow=body.flow_url),
        webcam_url=body.webcam_url,
        flow_thresholds=body.flow_thresholds,
        alert_level=AlertLevel.NORMAL,
    )


def build_river_data(
    body: WaterBodyConfig,
    level: SeriesOutcome,
    flow: SeriesOutcome,
    temperature: SeriesOutcome,
) -> RiverData:
    previous_level, level_percentage, level_status = summarize_series(ReadingKind.LEVEL, level.history)
    previous_flow, flow_percentage, flow_status = summarize_series(ReadingKind.FLOW, flow.history)
    previous_temperature, temperature_change, temperature_status = summarize_series(
        ReadingKind.TEMPERATURE, temperature.history
    )

    alert_level = AlertLevel.NORMAL
    if body.flow_thresholds and flow.current is not None:
        alert_level = get_alert_level_from_flow(flow.current.value, body.flow_thresholds)

    river = empty_river_data(body)
    return river.model_copy(
        update={
            "current": CurrentReadings(level=level.current, temperature=temperature.current, flow=flow.current),
            "history": ReadingHistory(
                levels=level.history,
                temperatures=temperature.history,
                flows=flow.history,
            ),
            "previous_day": CurrentReadings(
                level=previous_level,
                temperature=previous_temperature,
                flow=previous_flow,
            ),
            "changes": ChangeSummary(
                level_percentage=level_percentage,
                level_status=level_status if level.history else None,
                temperature_change=temperature_change,
                temperature_status=temperature_status if temperature.history else None,
                flow_percentage=flow_percentage,
                flow_status=flow_status if flow.history else None,
            ),
            "alert_level": alert_level,
            "source_status": {
                ReadingKind.LEVEL: level.status,
                ReadingKind.FLOW: flow.status,
                ReadingKind.TEMPERATURE: temperature.status,
            },
        }
    )


async def fetch_river_data(client: httpx.AsyncClient, body: WaterBodyConfig, now: datetime) -> RiverData:
    """Collect all readings for one water body; any unexpected error yields an empty record."""
    try:
        temperature_parser = parser_for(body, ReadingKind.TEMPERATURE)
        if body.is_lake:
            level = flow = SeriesOutcome.skipped()
            temperature = await fetch_series(
                client, body.temperature_url, ReadingKind.TEMPERATURE, temperature_parser, now
            )
        else:
            level, flow, temperature = await asyncio.gather(
                fetch_series(client, body.level_url, ReadingKind.LEVEL, parser_for(body, ReadingKind.LEVEL), now),
                fetch_series(client, body.flow_url, ReadingKind.FLOW, parser_for(body, ReadingKind.FLOW), now),
                fetch_series(client, body.temperature_url, ReadingKind.TEMPERATURE, temperature_parser, now),
            )
        return build_river_data(body, level, flow, temperature)
    except Exception:
        logger.exception("Unexpected error while collecting data for %s", body.name)
        return empty_river_data(body)


async def fetch_rivers_data(
    water_bodies: list[WaterBodyConfig] | None = None,
    client: httpx.AsyncClient | None = None,
    now: datetime | None = None,
) -> RiversData:
    """Fetch every configured water body in parallel. No caching here; see `get_rivers_data`."""
    try:
        settings = get_settings()
        if water_bodies is None:
            water_bodies = settings.water_bodies
        if now is None:
            now = local_now(settings.timezone)

        if client is None:
            async with httpx.AsyncClient(
                headers=request_headers(settings),
                timeout=settings.request_timeout,
                follow_redirects=True,
            ) as own_client:
                rivers = await asyncio.gather(*(fetch_river_data(own_client, body, now) for body in water_bodies))
        else:
            rivers = await asyncio.gather(*(fetch_river_data(client, body, now) for body in water_bodies))
    except Exception as exc:
        logger.exception("Failed to fetch river data")
        return RiversData(rivers=[], last_updated=now or datetime.now(), error=str(exc))

    logger.info("Fetched data for %s water bodies", len(rivers))
    return RiversData(rivers=list(rivers), last_updated=now)


@cached(lambda: "rivers_data", skip=lambda result: result.error is not None)
async def get_rivers_data() -> RiversData:
    return await fetch_rivers_data()


async def get_river_by_id(identifier: str) -> RiverData | None:
    data = await get_rivers_data()
    for river in data.rivers:
        if river.id.lower() == identifier.lower():
            return river
    return None
