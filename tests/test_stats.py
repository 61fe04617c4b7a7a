from datetime import date
from datetime import timedelta

from github_wallpaper.services.stats_service import calculate_stats
from github_wallpaper.snapshot import ContributionDay
from github_wallpaper.snapshot import ContributionStats

TODAY = date(2026, 2, 20)


def make_days(counts: list[int], end: date = TODAY) -> list[ContributionDay]:
    """Build consecutive days where the last count falls on `end`."""

    start = end - timedelta(days=len(counts) - 1)
    return [
        ContributionDay(date=start + timedelta(days=index), count=count)
        for index, count in enumerate(counts)
    ]


def test_empty_sequence_yields_zero_stats() -> None:
    assert calculate_stats([], today=TODAY) == ContributionStats(
        current_streak=0, longest_streak=0, today_count=0
    )


def test_all_zero_counts_yield_zero_stats() -> None:
    stats = calculate_stats(make_days([0, 0, 0, 0, 0]), today=TODAY)

    assert stats == ContributionStats(current_streak=0, longest_streak=0, today_count=0)


def test_current_streak_counts_today_and_previous_days() -> None:
    stats = calculate_stats(make_days([3, 0, 1, 2, 1, 4, 6]), today=TODAY)

    assert stats.current_streak == 5
    assert stats.today_count == 6
    assert stats.longest_streak == 5


def test_current_streak_is_zero_when_today_has_no_contributions() -> None:
    stats = calculate_stats(make_days([1, 2, 3, 0]), today=TODAY)

    assert stats.current_streak == 0
    assert stats.longest_streak == 3
    assert stats.today_count == 0


def test_current_streak_is_zero_when_data_ends_before_today() -> None:
    days = make_days([1, 1, 1, 1], end=TODAY - timedelta(days=1))

    stats = calculate_stats(days, today=TODAY)

    assert stats.current_streak == 0
    assert stats.longest_streak == 4
    assert stats.today_count == 0


def test_days_after_today_are_ignored_for_current_streak() -> None:
    days = make_days([2, 2, 0], end=TODAY + timedelta(days=1))

    stats = calculate_stats(days, today=TODAY)

    assert stats.current_streak == 2
    assert stats.today_count == 2


def test_longest_streak_covers_every_run() -> None:
    counts = [1, 1, 0, 1, 1, 1, 1, 0, 5, 0, 1]
    stats = calculate_stats(make_days(counts), today=TODAY)

    assert stats.longest_streak == 4
    assert stats.current_streak == 1
    assert 0 <= stats.current_streak <= stats.longest_streak


def test_unsorted_input_is_sorted_before_scanning() -> None:
    days = make_days([1, 1, 1])

    stats = calculate_stats(list(reversed(days)), today=TODAY)

    assert stats.current_streak == 3
    assert stats.longest_streak == 3
