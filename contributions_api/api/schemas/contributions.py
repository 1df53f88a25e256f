from datetime import date

from pydantic import BaseModel


class ContributionDay(BaseModel):
    """Single day item used in contribution responses."""

    date: date
    count: int
    level: int


class DateRange(BaseModel):
    start: date
    end: date


class FlatContributionsResponse(BaseModel):
    """Days of all requested years as one chronological sequence."""

    total: int
    days: list[ContributionDay]


class YearContributions(BaseModel):
    """Contribution days of one year with the year's total."""

    total: int
    range: DateRange | None = None
    days: list[ContributionDay]


class NestedContributionsResponse(BaseModel):
    """Contribution days grouped by year, years in ascending order."""

    total: int
    years: dict[str, YearContributions]


class ErrorResponse(BaseModel):
    error: str
