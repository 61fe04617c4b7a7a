import logging
from collections.abc import Mapping
from datetime import date
from datetime import datetime
from datetime import UTC
from typing import Any

from pydantic import ValidationError

from github_wallpaper.github_api import GitHubAPIError
from github_wallpaper.github_api import MalformedResponseError
from github_wallpaper.github_api import fetch_contribution_calendar
from github_wallpaper.services.stats_service import calculate_stats
from github_wallpaper.snapshot import ContributionDay
from github_wallpaper.snapshot import ContributionLevel
from github_wallpaper.snapshot import Snapshot
from github_wallpaper.snapshot import Week
from github_wallpaper.storage.preferences import UserPreferences
from github_wallpaper.utils.dates import days_ago
from github_wallpaper.utils.dates import parse_date

logger = logging.getLogger(__name__)

# GitHub's calendar colors, light and dark theme variants.
COLOR_LEVELS: dict[str, ContributionLevel] = {
    "#ebedf0": ContributionLevel.NONE,
    "#161b22": ContributionLevel.NONE,
    "#9be9a8": ContributionLevel.FIRST_QUARTILE,
    "#0e4429": ContributionLevel.FIRST_QUARTILE,
    "#40c463": ContributionLevel.SECOND_QUARTILE,
    "#006d32": ContributionLevel.SECOND_QUARTILE,
    "#30a14e": ContributionLevel.THIRD_QUARTILE,
    "#26a641": ContributionLevel.THIRD_QUARTILE,
    "#216e39": ContributionLevel.FOURTH_QUARTILE,
    "#39d353": ContributionLevel.FOURTH_QUARTILE,
}


class FetchFailedError(Exception):
    """Raised when fetching fails and there is no cached snapshot to serve."""


def color_to_level(color: str | None, count: int) -> ContributionLevel:
    """Map a calendar cell color to a heatmap level in range 0..4."""

    if isinstance(color, str):
        level = COLOR_LEVELS.get(color.strip().lower())
        if level is not None:
            return level
    return ContributionLevel.FOURTH_QUARTILE if count > 0 else ContributionLevel.NONE


def parse_weeks(calendar: Mapping[str, Any]) -> list[Week]:
    """Convert the raw `contributionCalendar.weeks` payload into weeks."""

    raw_weeks = calendar.get("weeks")
    if not isinstance(raw_weeks, list):
        raise MalformedResponseError("GitHub contribution weeks are missing")

    weeks: list[Week] = []
    for raw_week in raw_weeks:
        if not isinstance(raw_week, Mapping):
            raise MalformedResponseError("GitHub contribution week is invalid")
        raw_days = raw_week.get("contributionDays")
        if not isinstance(raw_days, list):
            raise MalformedResponseError("GitHub contribution days are missing")

        days: list[ContributionDay] = []
        for item in raw_days:
            if not isinstance(item, Mapping):
                raise MalformedResponseError("GitHub contribution day is invalid")
            raw_date = item.get("date")
            raw_count = item.get("contributionCount")
            parsed_day = parse_date(raw_date) if isinstance(raw_date, str) else None
            if parsed_day is None or not isinstance(raw_count, int):
                raise MalformedResponseError("GitHub contribution day is invalid")

            days.append(
                ContributionDay(
                    date=parsed_day,
                    count=raw_count,
                    level=color_to_level(item.get("color"), raw_count),
                )
            )
        weeks.append(Week(days=days))

    return weeks


def build_snapshot(
    username: str,
    calendar: Mapping[str, Any],
    today: date | None = None,
    now: datetime | None = None,
) -> Snapshot:
    """Parse a raw calendar into a Snapshot with freshly computed stats."""

    weeks = parse_weeks(calendar)
    total = calendar.get("totalContributions")
    if not isinstance(total, int):
        raise MalformedResponseError("GitHub totalContributions is missing")

    stats = calculate_stats(
        (day for week in weeks for day in week.days), today=today
    )
    return Snapshot(
        username=username,
        total_contributions=total,
        weeks=weeks,
        current_streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        today_count=stats.today_count,
        last_updated=now or datetime.now(UTC),
    )


def fetch_contribution_data(
    username: str,
    token: str | None,
    preferences: UserPreferences,
    graphql_url: str,
    timeout: float = 30.0,
    today: date | None = None,
    now: datetime | None = None,
) -> Snapshot:
    """Fetch, parse and cache a fresh snapshot, falling back to the cache.

    Raises:
        FetchFailedError: If the fetch fails and nothing is cached.
    """

    try:
        calendar = fetch_contribution_calendar(
            username=username,
            token=token,
            graphql_url=graphql_url,
            timeout=timeout,
        )
        snapshot = build_snapshot(username, calendar, today=today, now=now)
    except (GitHubAPIError, ValidationError, ValueError, KeyError, TypeError) as exc:
        logger.error("Fetching contributions for %s failed: %s", username, exc)
        return load_from_cache_or_fail(preferences, str(exc) or repr(exc), today)

    logger.info(
        "Fetched %s contributions in %s weeks for %s "
        "(current=%s, longest=%s, today=%s)",
        snapshot.total_contributions,
        len(snapshot.weeks),
        username,
        snapshot.current_streak,
        snapshot.longest_streak,
        snapshot.today_count,
    )
    preferences.save_cached_data(snapshot)
    return snapshot


def load_from_cache_or_fail(
    preferences: UserPreferences, error_message: str, today: date | None = None
) -> Snapshot:
    cached = preferences.get_cached_data()
    if cached is None:
        raise FetchFailedError(error_message)

    logger.info(
        "Using cached data for %s from %s day(s) ago",
        cached.username,
        days_ago(cached.last_updated.date(), today),
    )
    return cached
