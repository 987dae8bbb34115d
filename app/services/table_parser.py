"""
Parser for the standard measurement table used by the HND/GKD gauge pages.

Rows look like ``<td>18.10.2026 14:15</td><td class="center">123</td>``; some
temperature pages add a third cell describing the measuring situation.
"""

import logging
import math
from datetime import datetime

from bs4 import BeautifulSoup

from app.models.schemas import DataPoint, ReadingKind
from app.services.normalizer import make_point, parse_decimal
from app.services.parsers import SeriesParser

logger = logging.getLogger(__name__)

# Tried in order; the first selector that matches any row wins.
ROW_SELECTORS = [
    "table.tblsort tbody tr",
    "table.tblsort tr",
    "table tbody tr",
    "table tr",
]


def select_rows(soup: BeautifulSoup, selectors: list[str] = ROW_SELECTORS) -> list:
    for selector in selectors:
        rows = [row for row in soup.select(selector) if row.find("td")]
        if rows:
            logger.debug("Selector %r matched %s rows", selector, len(rows))
            return rows
    return []


class TableParser(SeriesParser):
    name = "table"

    def parse(self, html: str, kind: ReadingKind, now: datetime) -> list[DataPoint]:
        soup = BeautifulSoup(html, "html.parser")
        history: list[DataPoint] = []
        skipped = 0

        for row in select_rows(soup):
            cells = row.find_all("td")
            value_cell = row.find("td", class_="center")
            if value_cell is None:
                if len(cells) < 2:
                    skipped += 1
                    continue
                value_cell = cells[1]

            date_text = " ".join(cells[0].get_text(" ", strip=True).split())
            value = parse_decimal(value_cell.get_text(strip=True))
            if math.isnan(value):
                skipped += 1
                continue

            situation = None
            if kind is ReadingKind.TEMPERATURE:
                extra = [cell for cell in cells[1:] if cell is not value_cell]
                if extra:
                    situation = extra[0].get_text(" ", strip=True) or None

            try:
                point = make_point(kind, date_text, value, situation)
            except ValueError:
                skipped += 1
                continue
            history.append(point)

        if skipped:
            logger.debug("Skipped %s malformed %s rows", skipped, kind.value)
        # Pages publish newest first already; the sort is stable for that order.
        history.sort(key=lambda point: point.timestamp, reverse=True)
        return history
