"""
Tests for settings loading.
"""

import pytest

from app.config import DEFAULT_SETTINGS_PATH, load_settings
from app.exceptions import ConfigurationError
from app.models.schemas import AlertLevel
from app.services.alerts import get_alert_level_from_flow


def write_settings(tmp_path, text):
    path = tmp_path / "settings.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_repository_settings_load():
    settings = load_settings(DEFAULT_SETTINGS_PATH)
    names = [body.name for body in settings.water_bodies]

    assert names == ["Inn", "Leitzach", "Söllbach", "Spitzingsee"]
    assert settings.cache_ttl_seconds == 900
    lake = settings.water_bodies[-1]
    assert lake.is_lake and lake.temperature_parser == "lake"


def test_multi_range_thresholds_from_yaml():
    leitzach = load_settings(DEFAULT_SETTINGS_PATH).water_bodies[1]
    assert get_alert_level_from_flow(10, leitzach.flow_thresholds) is AlertLevel.NORMAL
    assert get_alert_level_from_flow(4, leitzach.flow_thresholds) is AlertLevel.WARNING
    assert get_alert_level_from_flow(30, leitzach.flow_thresholds) is AlertLevel.ALERT


def test_defaults_apply(tmp_path):
    path = write_settings(
        tmp_path,
        "default:\n  water_bodies:\n    - name: Mangfall\n      location: Valley\n",
    )
    settings = load_settings(path)

    assert settings.timezone == "Europe/Berlin"
    assert settings.water_bodies[0].temperature_parser == "table"
    assert settings.water_bodies[0].flow_thresholds is None


@pytest.mark.parametrize(
    "text",
    [
        # lakes publish temperature only
        "default:\n  water_bodies:\n    - name: See\n      location: See\n      is_lake: true\n"
        "      level_url: https://x.example/a\n      temperature_url: https://x.example/b\n",
        "default:\n  water_bodies:\n    - name: See\n      location: See\n      is_lake: true\n",
        "default:\n  water_bodies:\n    - name: Inn\n      location: X\n      temperature_parser: chart\n",
        "- just\n- a list\n",
        "default: [unclosed\n",
        "default:\n  water_bodies:\n    - name: See\n      location: See\n      is_lake: true\n"
        "      temperature_url: https://x.example/b\n      chart_reference_year: 9999\n",
    ],
)
def test_invalid_settings(tmp_path, text):
    with pytest.raises(ConfigurationError):
        load_settings(write_settings(tmp_path, text))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / "missing.yaml")
