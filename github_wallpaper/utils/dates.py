from datetime import date

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def get_today() -> date:
    """Return the current local calendar date."""

    return date.today()


def is_today(day: date, today: date | None = None) -> bool:
    return day == (today or get_today())


def parse_date(value: str) -> date | None:
    """Parse an ISO `YYYY-MM-DD` string, returning None when it is invalid."""

    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def format_date(value: str | date) -> str:
    """Format a day for display, e.g. `Mar 05, 2026`.

    Unparseable strings are returned unchanged.
    """

    parsed = value if isinstance(value, date) else parse_date(value)
    if parsed is None:
        return str(value)
    return f"{month_abbr(parsed.month)} {parsed.day:02d}, {parsed.year}"


def days_ago(value: str | date, today: date | None = None) -> int:
    parsed = value if isinstance(value, date) else parse_date(value)
    if parsed is None:
        return 0
    return ((today or get_today()) - parsed).days


def month_abbr(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_ABBREVIATIONS[month - 1]
    return ""
