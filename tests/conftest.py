from collections.abc import Callable
from datetime import date
from datetime import datetime
from datetime import timedelta
from datetime import UTC

import pytest

from github_wallpaper.core.signals import RefreshSignal
from github_wallpaper.db import create_session_factory
from github_wallpaper.services.contribution_service import build_snapshot
from github_wallpaper.snapshot import Snapshot
from github_wallpaper.storage.preferences import UserPreferences

TODAY = date(2026, 2, 20)
FETCHED_AT = datetime(2026, 2, 20, 8, 30, tzinfo=UTC)
LEVEL_COLORS = ("#ebedf0", "#9be9a8", "#40c463", "#30a14e", "#216e39")


def calendar_payload(counts_by_day: dict[date, int]) -> dict[str, object]:
    """Build a `contributionCalendar` mapping with Sunday-first weeks."""

    if not counts_by_day:
        return {"totalContributions": 0, "weeks": []}

    first = min(counts_by_day)
    last = max(counts_by_day)
    current = first - timedelta(days=(first.weekday() + 1) % 7)

    weeks: list[dict[str, object]] = []
    while current <= last:
        days = []
        for _ in range(7):
            if first <= current <= last:
                count = counts_by_day.get(current, 0)
                days.append(
                    {
                        "date": current.isoformat(),
                        "contributionCount": count,
                        "color": LEVEL_COLORS[min(count, 4)],
                    }
                )
            current += timedelta(days=1)
        weeks.append({"contributionDays": days})

    return {"totalContributions": sum(counts_by_day.values()), "weeks": weeks}


def graphql_payload(counts_by_day: dict[date, int]) -> dict[str, object]:
    return {
        "data": {
            "user": {
                "contributionsCollection": {
                    "contributionCalendar": calendar_payload(counts_by_day)
                }
            }
        }
    }


@pytest.fixture
def signal() -> RefreshSignal:
    return RefreshSignal()


@pytest.fixture
def preferences(signal: RefreshSignal) -> UserPreferences:
    return UserPreferences(
        create_session_factory("sqlite+pysqlite:///:memory:"), signal=signal
    )


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    def factory(
        counts_by_day: dict[date, int] | None = None,
        username: str = "octocat",
        today: date = TODAY,
    ) -> Snapshot:
        if counts_by_day is None:
            counts_by_day = {
                TODAY - timedelta(days=offset): offset % 3 for offset in range(60)
            }
        return build_snapshot(
            username, calendar_payload(counts_by_day), today=today, now=FETCHED_AT
        )

    return factory


@pytest.fixture
def make_calendar() -> Callable[[dict[date, int]], dict[str, object]]:
    return calendar_payload


@pytest.fixture
def make_graphql_payload() -> Callable[[dict[date, int]], dict[str, object]]:
    return graphql_payload
