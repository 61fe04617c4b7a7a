from datetime import date
from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator


class ContributionLevel(IntEnum):
    """Color intensity bucket for a single heatmap cell."""

    NONE = 0
    FIRST_QUARTILE = 1
    SECOND_QUARTILE = 2
    THIRD_QUARTILE = 3
    FOURTH_QUARTILE = 4


class ContributionDay(BaseModel):
    """Contribution count for one calendar day."""

    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(ge=0)
    level: ContributionLevel = ContributionLevel.NONE


class Week(BaseModel):
    """Up to seven chronologically ordered contribution days."""

    model_config = ConfigDict(frozen=True)

    days: list[ContributionDay] = Field(default_factory=list, max_length=7)


class ContributionStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_streak: int = 0
    longest_streak: int = 0
    today_count: int = 0


class Credentials(BaseModel):
    """User supplied identity and optional GitHub access token."""

    username: str
    token: str | None = None


class Snapshot(BaseModel):
    """Cached, fully parsed result of one successful fetch cycle."""

    model_config = ConfigDict(frozen=True)

    username: str
    total_contributions: int = Field(ge=0)
    weeks: list[Week]
    current_streak: int = Field(ge=0)
    longest_streak: int = Field(ge=0)
    today_count: int = Field(ge=0)
    last_updated: datetime

    @model_validator(mode="after")
    def check_days_are_ordered(self) -> "Snapshot":
        previous: date | None = None
        for day in self.days():
            if previous is not None and day.date <= previous:
                raise ValueError(
                    f"contribution days are not strictly ordered at {day.date}"
                )
            previous = day.date
        return self

    def days(self) -> list[ContributionDay]:
        return [day for week in self.weeks for day in week.days]

    def stats(self) -> ContributionStats:
        return ContributionStats(
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            today_count=self.today_count,
        )
