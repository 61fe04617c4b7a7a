from dataclasses import dataclass
from enum import Enum


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontStyle(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"


@dataclass(frozen=True)
class Clear:
    """Fill the whole canvas."""

    color: str


@dataclass(frozen=True)
class DrawText:
    """Draw a single line of text; `y` is the baseline."""

    text: str
    x: float
    y: float
    size: float
    color: str
    align: TextAlign = TextAlign.CENTER
    style: FontStyle = FontStyle.NORMAL


@dataclass(frozen=True)
class DrawRoundRect:
    left: float
    top: float
    right: float
    bottom: float
    radius: float
    fill: str | None = None
    outline: str | None = None
    stroke_width: float = 0.0
    glow_color: str | None = None
    glow_radius: float = 0.0


DrawCommand = Clear | DrawText | DrawRoundRect
