from datetime import date
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator

ResponseFormat = Literal["flat", "nested"]


class ResolvedQuery(BaseModel):
    """Normalized year selection; also serves as part of the cache key."""

    model_config = ConfigDict(frozen=True)

    years: tuple[int, ...] = ()
    fetch_all: bool = False
    last_year: bool = False
    format: ResponseFormat = "flat"

    @field_validator("years")
    @classmethod
    def _normalize_years(cls, years: tuple[int, ...]) -> tuple[int, ...]:
        return tuple(sorted(set(years)))


class DayRecord(BaseModel):
    """Contribution count of a single calendar day."""

    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(ge=0)
    level: int = Field(ge=0, le=4)


class DateRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: date
    end: date


class YearResult(BaseModel):
    """Parsed calendar of one year, days in ascending date order."""

    model_config = ConfigDict(frozen=True)

    year: int
    days: tuple[DayRecord, ...]
    total: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> "YearResult":
        counted = sum(day.count for day in self.days)
        if counted != self.total:
            raise ValueError(
                f"year total {self.total} does not match day counts {counted}"
            )
        return self

    @classmethod
    def from_days(cls, year: int, days: list[DayRecord]) -> "YearResult":
        ordered = sorted(days, key=lambda day: day.date)
        return cls(
            year=year,
            days=tuple(ordered),
            total=sum(day.count for day in ordered),
        )

    @property
    def range(self) -> DateRange | None:
        if not self.days:
            return None
        return DateRange(start=self.days[0].date, end=self.days[-1].date)


class AggregatedResponse(BaseModel):
    """Included years of one request together with their overall total."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0)
    years: dict[int, YearResult]
