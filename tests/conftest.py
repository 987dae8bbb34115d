"""
Shared fixtures: small HTML pages shaped like the upstream gauge pages.
"""

from datetime import datetime, timedelta

import pytest

from app.config import WaterBodyConfig
from app.models.schemas import Thresholds
from app.services import water_data


def table_page(rows, table_class="tblsort", with_tbody=True):
    """Build a measurement table page from (date, value[, situation]) tuples."""
    body = []
    for row in rows:
        cells = [f"<td>{row[0]}</td>", f'<td class="center">{row[1]}</td>']
        if len(row) > 2:
            cells.append(f"<td>{row[2]}</td>")
        body.append("<tr>" + "".join(cells) + "</tr>")
    rows_html = "".join(body)
    if with_tbody:
        rows_html = f"<thead><tr><th>Datum</th><th>Wert</th></tr></thead><tbody>{rows_html}</tbody>"
    return f'<html><body><table class="{table_class}">{rows_html}</table></body></html>'


def quarter_hour_rows(start: datetime, values):
    """Rows every 15 minutes going back from `start`, newest first."""
    return [
        ((start - timedelta(minutes=15 * index)).strftime("%d.%m.%Y %H:%M"), str(value).replace(".", ","))
        for index, value in enumerate(values)
    ]


LAKE_PAGE = """
<html><body>
<p>Der aktuelle Wert beträgt <b>12,4</b> Grad</p>
<script>
Highcharts.chart('container', {
    series: [{
        name: 'Wassertemperatur',
        data: [[288, 12.1], [289, 11.8], [290, 11.5], [291, 11.9], [295, 10.0]]
    }]
});
</script>
<table class="tblsort">
  <tbody>
    <tr><td>17. Okt</td><td class="center">11,6</td></tr>
    <tr><td>16. Okt</td><td class="center">11,7</td></tr>
    <tr><td>15. Okt</td><td class="center">--</td></tr>
  </tbody>
</table>
</body></html>
"""


@pytest.fixture
def now():
    return datetime(2026, 10, 18, 9, 30)


@pytest.fixture
def lake_page():
    return LAKE_PAGE


@pytest.fixture
def thresholds():
    return Thresholds(green=(None, 20), yellow=(20, 40), red=(40, None))


@pytest.fixture
def river_body(thresholds):
    return WaterBodyConfig(
        name="Inn",
        location="Feldolling",
        level_url="https://hnd.example/pegel/inn/feldolling-18204006/tabelle?methode=wasserstand",
        flow_url="https://hnd.example/pegel/inn/feldolling-18204006/tabelle?methode=abfluss",
        temperature_url="https://gkd.example/fluesse/wassertemperatur/feldolling/tabelle",
        flow_thresholds=thresholds,
    )


@pytest.fixture
def lake_body():
    return WaterBodyConfig(
        name="Spitzingsee",
        location="Spitzingsee",
        is_lake=True,
        temperature_url="https://gkd.example/seen/wassertemperatur/spitzingsee/messwerte",
        temperature_parser="lake",
        chart_reference_year=2026,
    )


@pytest.fixture(autouse=True)
def clear_cache(monkeypatch):
    monkeypatch.setattr(water_data, "_cache", None)
