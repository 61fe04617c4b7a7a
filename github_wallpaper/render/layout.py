import random
from dataclasses import dataclass
from datetime import date

from github_wallpaper.render.commands import Clear
from github_wallpaper.render.commands import DrawCommand
from github_wallpaper.render.commands import DrawRoundRect
from github_wallpaper.render.commands import DrawText
from github_wallpaper.render.commands import FontStyle
from github_wallpaper.render.commands import TextAlign
from github_wallpaper.snapshot import Snapshot
from github_wallpaper.snapshot import Week
from github_wallpaper.utils.dates import get_today
from github_wallpaper.utils.dates import is_today
from github_wallpaper.utils.dates import month_abbr

ACCENT_COLOR = "#39D353"
TODAY_HIGHLIGHT_COLOR = "#FF6B35"
NO_DATA_MESSAGE = "No contribution data"
DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
QUOTE_WRAP_LENGTH = 30

QUOTES = (
    "Commit to excellence every day",
    "Small commits lead to big changes",
    "Consistency is the key to mastery",
    "Build your legacy, one commit at a time",
    "Your code tells your story",
    "Progress over perfection",
    "Every day is a chance to improve",
    "Code with passion, ship with pride",
)


@dataclass(frozen=True)
class Theme:
    levels: tuple[str, str, str, str, str]
    background: str
    text: str


LIGHT_THEME = Theme(
    levels=("#EBEDF0", "#9BE9A8", "#40C463", "#30A14E", "#216E39"),
    background="#FFFFFF",
    text="#24292F",
)
DARK_THEME = Theme(
    levels=("#161B22", "#0E4429", "#006D32", "#26A641", "#39D353"),
    background="#0D1117",
    text="#C9D1D9",
)


def get_theme(dark_mode: bool) -> Theme:
    return DARK_THEME if dark_mode else LIGHT_THEME


def filter_weeks_to_year(weeks: list[Week], year: int) -> list[Week]:
    """Drop days outside `year`, then drop weeks left empty."""

    filtered = [
        Week(days=[day for day in week.days if day.date.year == year])
        for week in weeks
    ]
    return [week for week in filtered if week.days]


def weekday_row(day: date) -> int:
    """Grid row of a day, Sunday being row 0."""

    return (day.weekday() + 1) % 7


def split_quote(quote: str) -> list[str]:
    if len(quote) <= QUOTE_WRAP_LENGTH:
        return [f'"{quote}"']

    words = quote.split(" ")
    middle = len(words) // 2
    return [f'"{" ".join(words[:middle])}', f'{" ".join(words[middle:])}"']


def month_label_positions(weeks: list[Week]) -> list[tuple[int, str]]:
    """Return `(week_index, label)` for every week starting a new month."""

    labels: list[tuple[int, str]] = []
    last_month: int | None = None
    for index, week in enumerate(weeks):
        if not week.days:
            continue
        month = week.days[0].date.month
        if month != last_month:
            labels.append((index, month_abbr(month)))
            last_month = month
    return labels


def build_heatmap_commands(
    width: int,
    height: int,
    dark_mode: bool,
    snapshot: Snapshot | None,
    year: int,
    today: date | None = None,
    rng: random.Random | None = None,
) -> list[DrawCommand]:
    """Lay out the wallpaper as a list of drawing commands.

    Apart from the quote, which is drawn from `rng`, the output only depends
    on the arguments.
    """

    theme = get_theme(dark_mode)
    commands: list[DrawCommand] = [Clear(theme.background)]

    weeks = filter_weeks_to_year(snapshot.weeks, year) if snapshot else []
    if not weeks:
        commands.append(
            DrawText(
                NO_DATA_MESSAGE,
                x=width / 2,
                y=height / 2,
                size=width * 0.05,
                color=theme.text,
                style=FontStyle.BOLD,
            )
        )
        return commands

    rng = rng or random.Random()
    center_x = width / 2
    y_pos = height * 0.22

    total = sum(day.count for week in weeks for day in week.days)
    commands.append(
        DrawText(
            f"{total} contributions in {year}",
            x=center_x,
            y=y_pos,
            size=width * 0.06,
            color=ACCENT_COLOR,
            style=FontStyle.BOLD,
        )
    )
    y_pos += height * 0.05

    quote_size = width * 0.045
    for line_index, line in enumerate(split_quote(rng.choice(QUOTES))):
        commands.append(
            DrawText(
                line,
                x=center_x,
                y=y_pos + line_index * quote_size * 1.2,
                size=quote_size,
                color=theme.text,
                style=FontStyle.ITALIC,
            )
        )

    commands.extend(
        _grid_commands(width, height, theme, weeks, height * 0.36, today or get_today())
    )
    return commands


def _grid_commands(
    width: int,
    height: int,
    theme: Theme,
    weeks: list[Week],
    grid_top: float,
    today: date,
) -> list[DrawCommand]:
    box_padding = width * 0.08
    available_width = width - 2 * box_padding
    available_height = height * 0.45
    num_weeks = len(weeks)
    num_days = len(DAY_LABELS)

    # One extra column leaves room for the day labels.
    cell = min(available_width / (num_weeks + 1), available_height / num_days) * 0.85
    gap = cell * 0.15
    step = cell + gap

    grid_width = num_weeks * cell + (num_weeks - 1) * gap
    grid_height = num_days * cell + (num_days - 1) * gap
    day_label_width = cell * 1.2
    start_x = (width - grid_width - day_label_width) / 2 + day_label_width

    commands: list[DrawCommand] = []
    for index, label in enumerate(DAY_LABELS):
        commands.append(
            DrawText(
                label,
                x=start_x - cell * 1.5,
                y=grid_top + index * step + cell * 0.65,
                size=cell * 0.4,
                color=theme.text,
                align=TextAlign.RIGHT,
            )
        )

    radius = cell * 0.2
    for week_index, week in enumerate(weeks):
        for day in week.days:
            left = start_x + week_index * step
            top = grid_top + weekday_row(day.date) * step
            fill = theme.levels[max(0, min(4, int(day.level)))]

            if not is_today(day.date, today):
                commands.append(
                    DrawRoundRect(left, top, left + cell, top + cell, radius, fill=fill)
                )
                continue

            commands.append(
                DrawRoundRect(
                    left,
                    top,
                    left + cell,
                    top + cell,
                    radius,
                    fill=fill,
                    glow_color=TODAY_HIGHLIGHT_COLOR,
                    glow_radius=cell * 0.5,
                )
            )
            commands.append(
                DrawRoundRect(
                    left,
                    top,
                    left + cell,
                    top + cell,
                    radius,
                    outline=TODAY_HIGHLIGHT_COLOR,
                    stroke_width=cell * 0.12,
                )
            )

    label_y = grid_top + grid_height + cell * 0.8
    for week_index, label in month_label_positions(weeks):
        commands.append(
            DrawText(
                label,
                x=start_x + week_index * step + cell / 2,
                y=label_y,
                size=cell * 0.55,
                color=theme.text,
                style=FontStyle.BOLD,
            )
        )

    return commands
