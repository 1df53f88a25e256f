from collections.abc import Iterable

from loguru import logger

from contributions_api.github_api import GitHubCalendarClient
from contributions_api.models import AggregatedResponse
from contributions_api.models import ResolvedQuery
from contributions_api.models import ResponseFormat
from contributions_api.models import YearResult


def select_years(available_years: Iterable[int], query: ResolvedQuery) -> list[int]:
    """Pick the discovered years that have to be retrieved for a query."""

    available = sorted(set(available_years))
    if not available:
        return available
    if query.last_year and not query.years:
        return [available[-1]]
    if query.fetch_all:
        return available

    selected = {year for year in query.years if year in available}
    if query.last_year:
        selected.add(available[-1])
    return sorted(selected)


def aggregate(
    results: Iterable[YearResult], query: ResolvedQuery
) -> AggregatedResponse:
    """Merge per-year results into one response, keeping only requested years."""

    by_year = {result.year: result for result in results}
    if query.last_year and not query.years:
        included = {max(by_year)} if by_year else set()
    elif query.fetch_all:
        included = set(by_year)
    else:
        included = set(query.years)
        if query.last_year and by_year:
            included.add(max(by_year))

    years = {year: by_year[year] for year in sorted(included) if year in by_year}
    return AggregatedResponse(
        total=sum(result.total for result in years.values()),
        years=years,
    )


def _day_payload(result: YearResult) -> list[dict[str, object]]:
    return [
        {"date": day.date.isoformat(), "count": day.count, "level": day.level}
        for day in result.days
    ]


def shape_response(
    response: AggregatedResponse, format: ResponseFormat = "flat"
) -> dict[str, object]:
    """Render an aggregated response in the flat or nested JSON shape."""

    ordered = [response.years[year] for year in sorted(response.years)]

    if format == "nested":
        years: dict[str, object] = {}
        for result in ordered:
            date_range = result.range
            years[str(result.year)] = {
                "total": result.total,
                "range": (
                    {
                        "start": date_range.start.isoformat(),
                        "end": date_range.end.isoformat(),
                    }
                    if date_range
                    else None
                ),
                "days": _day_payload(result),
            }
        return {"total": response.total, "years": years}

    days: list[dict[str, object]] = []
    for result in ordered:
        days.extend(_day_payload(result))
    return {"total": response.total, "days": days}


async def fetch_contributions_for_query(
    username: str, query: ResolvedQuery, client: GitHubCalendarClient
) -> AggregatedResponse:
    """Run discovery, per-year retrieval and aggregation for one query."""

    async with client:
        available_years = await client.fetch_available_years(username)
        years = select_years(available_years, query)
        logger.debug("Fetching {} calendars for {}", years, username)
        results = await client.fetch_years(username, years)

    return aggregate(results, query)
