from collections.abc import Iterable
from datetime import date

from github_wallpaper.snapshot import ContributionDay
from github_wallpaper.snapshot import ContributionStats
from github_wallpaper.utils.dates import get_today


def calculate_stats(
    days: Iterable[ContributionDay], today: date | None = None
) -> ContributionStats:
    """Compute current streak, longest streak and today's count.

    The current streak is anchored on `today`: it counts backwards from the
    entry for today and is 0 when today is missing from `days`.
    """

    today = today or get_today()
    ordered = sorted(days, key=lambda day: day.date)

    today_count = next((day.count for day in ordered if day.date == today), 0)

    current_streak = 0
    found_today = False
    for day in reversed(ordered):
        if day.date == today:
            found_today = True
        if not found_today:
            continue
        if day.count <= 0:
            break
        current_streak += 1

    longest_streak = 0
    run_length = 0
    for day in ordered:
        if day.count > 0:
            run_length += 1
            longest_streak = max(longest_streak, run_length)
        else:
            run_length = 0

    return ContributionStats(
        current_streak=current_streak,
        longest_streak=longest_streak,
        today_count=today_count,
    )
