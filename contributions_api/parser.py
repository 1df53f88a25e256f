"""Extraction of contribution data from GitHub's profile calendar markup.

All knowledge of the HTML structure served by GitHub lives in this module.
Any deviation from the expected shape raises `ParseError` instead of
producing partial data.
"""

import re
from datetime import date

from bs4 import BeautifulSoup
from bs4 import Tag
from loguru import logger

from contributions_api.errors import ParseError
from contributions_api.models import DayRecord
from contributions_api.models import YearResult

YEAR_LINK_SELECTOR = "a.js-year-link"
DAY_CELL_SELECTOR = "table.js-calendar-graph-table td.ContributionCalendar-day"
TOOLTIP_SELECTOR = "tool-tip[for]"
TOTAL_HEADING_SELECTOR = ".js-yearly-contributions h2"

_COUNT_PATTERN = re.compile(r"^([0-9][0-9,]*|No)\s+contributions?\b")


def _to_count(raw_value: str) -> int:
    if raw_value == "No":
        return 0
    return int(raw_value.replace(",", ""))


def parse_year_links(markup: str) -> list[int]:
    """Return the contribution years listed on a profile page, ascending."""

    soup = BeautifulSoup(markup, "html.parser")
    years: set[int] = set()
    for link in soup.select(YEAR_LINK_SELECTOR):
        text = link.get_text(strip=True)
        try:
            years.add(int(text))
        except ValueError as exc:
            logger.warning("Unexpected year link label: {!r}", text)
            raise ParseError("Unexpected year link label") from exc
    return sorted(years)


def _tooltip_counts(soup: BeautifulSoup) -> dict[str, int]:
    counts: dict[str, int] = {}
    for tooltip in soup.select(TOOLTIP_SELECTOR):
        text = tooltip.get_text(" ", strip=True)
        match = _COUNT_PATTERN.match(text)
        if not match:
            logger.warning("Unparseable contribution tooltip: {!r}", text)
            raise ParseError("Unable to parse contribution tooltip")
        counts[str(tooltip["for"])] = _to_count(match.group(1))
    return counts


def _stated_total(soup: BeautifulSoup) -> int | None:
    heading = soup.select_one(TOTAL_HEADING_SELECTOR)
    if heading is None:
        return None

    text = heading.get_text(" ", strip=True)
    match = _COUNT_PATTERN.match(text)
    if not match:
        logger.warning("Unparseable total contributions heading: {!r}", text)
        raise ParseError("Unable to parse total contributions count")
    return _to_count(match.group(1))


def _parse_day(cell: Tag, counts: dict[str, int]) -> DayRecord:
    raw_date = cell.get("data-date")
    raw_level = cell.get("data-level")
    if not isinstance(raw_date, str) or not isinstance(raw_level, str):
        raise ParseError("Calendar cell is missing data-date or data-level")

    try:
        day = date.fromisoformat(raw_date)
        level = int(raw_level)
    except ValueError as exc:
        logger.warning(
            "Malformed calendar cell: data-date={!r} data-level={!r}",
            raw_date,
            raw_level,
        )
        raise ParseError("Malformed calendar cell") from exc
    if not 0 <= level <= 4:
        raise ParseError(f"Unexpected contribution level {level} on {day}")

    cell_id = cell.get("id")
    if isinstance(cell_id, str) and cell_id in counts:
        count = counts[cell_id]
    elif level == 0:
        count = 0
    else:
        raise ParseError(f"Missing contribution count for {day}")

    return DayRecord(date=day, count=count, level=level)


def parse_calendar(markup: str, year: int) -> YearResult:
    """Parse the contribution calendar of one year.

    The sum of all cell counts is checked against the total stated in the
    calendar heading when the heading is present. Cells dated outside `year`
    are dropped after that check.
    """

    soup = BeautifulSoup(markup, "html.parser")
    cells = soup.select(DAY_CELL_SELECTOR)
    if not cells:
        raise ParseError(f"No contribution calendar found for {year}")

    counts = _tooltip_counts(soup)
    days = [_parse_day(cell, counts) for cell in cells]

    if len({day.date for day in days}) != len(days):
        raise ParseError(f"Duplicate days in contribution calendar for {year}")

    stated_total = _stated_total(soup)
    counted_total = sum(day.count for day in days)
    if stated_total is not None and stated_total != counted_total:
        raise ParseError(
            f"Stated total {stated_total} for {year} does not match "
            f"the sum of daily counts {counted_total}"
        )

    return YearResult.from_days(year, [day for day in days if day.date.year == year])
