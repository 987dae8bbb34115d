"""
Tests for the HTTP routes, with the data layer patched out.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.schemas import (
    AlertLevel,
    CurrentReadings,
    ReadingHistory,
    ReadingKind,
    RiverData,
    RiversData,
)
from app.services.normalizer import make_point

NOW = datetime(2026, 10, 18, 9, 30)


def level_history(count):
    start = datetime(2026, 10, 18, 9, 15)
    return [
        make_point(ReadingKind.LEVEL, (start - timedelta(minutes=15 * index)).strftime("%d.%m.%Y %H:%M"), 200 - index)
        for index in range(count)
    ]


@pytest.fixture
def rivers_data():
    levels = level_history(120)
    flow = make_point(ReadingKind.FLOW, "18.10.2026 09:15", 45.0)
    temperature = make_point(ReadingKind.TEMPERATURE, "18.10.2026 12:00", 12.4)
    return RiversData(
        rivers=[
            RiverData(
                id="feldolling-18204006",
                name="Inn",
                location="Feldolling",
                current=CurrentReadings(level=levels[0], flow=flow),
                history=ReadingHistory(levels=levels, flows=[flow]),
                alert_level=AlertLevel.ALERT,
            ),
            RiverData(id="stauden-18206000", name="Leitzach", location="Stauden"),
            RiverData(
                id="lake-spitzingsee",
                name="Spitzingsee",
                location="Spitzingsee",
                is_lake=True,
                current=CurrentReadings(temperature=temperature),
                history=ReadingHistory(temperatures=[temperature]),
            ),
        ],
        last_updated=NOW,
    )


@pytest.fixture
def client(rivers_data):
    with patch("app.services.water_data.get_rivers_data", AsyncMock(return_value=rivers_data)):
        yield TestClient(app)


class TestRiverRoutes:
    def test_list_rivers(self, client):
        response = client.get("/rivers")
        assert response.status_code == 200
        assert "s-maxage=900" in response.headers["cache-control"]
        body = response.json()
        assert [river["id"] for river in body["rivers"]] == [
            "feldolling-18204006",
            "stauden-18206000",
            "lake-spitzingsee",
        ]
        assert body["error"] is None

    def test_batch_error_is_not_cached(self):
        failed = RiversData(rivers=[], last_updated=NOW, error="boom")
        with patch("app.services.water_data.get_rivers_data", AsyncMock(return_value=failed)):
            response = TestClient(app).get("/rivers")
        assert response.json()["error"] == "boom"
        assert "no-store" in response.headers["cache-control"]

    def test_get_river(self, client):
        response = client.get("/rivers/feldolling-18204006")
        assert response.status_code == 200
        assert response.json()["current"]["level"]["level"] == 200

    def test_unknown_river(self, client):
        assert client.get("/rivers/nowhere-1").status_code == 404

    def test_windows(self, client):
        assert client.get("/rivers/lake-spitzingsee/windows").json() == ["1w", "2w", "1m", "2m", "6m"]

    def test_change(self, client):
        response = client.get("/rivers/feldolling-18204006/change", params={"kind": "level", "window": "24h"})
        assert response.status_code == 200
        body = response.json()
        assert body["absolute_change"] == pytest.approx(96.0)
        assert body["status"] == "large-increase"

    def test_change_insufficient_history(self, client):
        response = client.get("/rivers/feldolling-18204006/change", params={"kind": "level", "window": "1w"})
        assert response.status_code == 200
        assert response.json() is None

    def test_change_rejects_lake_window_for_river(self, client):
        response = client.get("/rivers/feldolling-18204006/change", params={"kind": "level", "window": "2m"})
        assert response.status_code == 400

    def test_change_rejects_level_for_lake(self, client):
        response = client.get("/rivers/lake-spitzingsee/change", params={"kind": "level", "window": "1w"})
        assert response.status_code == 400

    def test_change_invalid_window(self, client):
        response = client.get("/rivers/feldolling-18204006/change", params={"kind": "level", "window": "3h"})
        assert response.status_code == 422


class TestAlertRoutes:
    def test_active_alerts(self, client):
        body = client.get("/alerts").json()
        assert len(body) == 1
        assert body[0]["id"] == "feldolling-18204006"
        assert body[0]["flow"] == 45.0

    def test_summary(self, client):
        body = client.get("/alerts/summary").json()
        counts = {entry["alert_level"]: entry["count"] for entry in body}
        assert counts == {"alert": 1, "normal": 2}


class TestReportRoute:
    def test_report(self, client):
        body = client.get("/report/feldolling-18204006").json()
        assert body["success"] is True
        assert "Current Level:* 200 cm" in body["data"]
        assert "↗️ Rising" in body["data"]

    def test_report_for_lake_is_rejected(self, client):
        assert client.get("/report/lake-spitzingsee").status_code == 400


def test_health():
    response = TestClient(app).get("/health")
    assert response.json()["status"] == "healthy"
