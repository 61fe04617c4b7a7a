import io
import logging
from functools import lru_cache

from PIL import Image
from PIL import ImageDraw
from PIL import ImageFilter
from PIL import ImageFont

from github_wallpaper.render.commands import Clear
from github_wallpaper.render.commands import DrawCommand
from github_wallpaper.render.commands import DrawRoundRect
from github_wallpaper.render.commands import DrawText
from github_wallpaper.render.commands import FontStyle
from github_wallpaper.render.commands import TextAlign

logger = logging.getLogger(__name__)

FONT_PATHS: dict[FontStyle, tuple[str, ...]] = {
    FontStyle.NORMAL: (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "DejaVuSans.ttf",
    ),
    FontStyle.BOLD: (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "DejaVuSans-Bold.ttf",
    ),
    FontStyle.ITALIC: (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Italic.ttf",
        "DejaVuSans-Oblique.ttf",
    ),
}

# Pillow anchors: horizontal alignment + "s" for baseline.
TEXT_ANCHORS = {
    TextAlign.LEFT: "ls",
    TextAlign.CENTER: "ms",
    TextAlign.RIGHT: "rs",
}


@lru_cache(maxsize=64)
def load_font(style: FontStyle, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for path in FONT_PATHS[style]:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    logger.debug("No TrueType font found for %s, using Pillow default", style.value)
    return ImageFont.load_default(size)


def paint(commands: list[DrawCommand], width: int, height: int) -> Image.Image:
    """Execute drawing commands on a new RGBA image."""

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    for command in commands:
        if isinstance(command, Clear):
            image.paste(command.color, (0, 0, width, height))
        elif isinstance(command, DrawText):
            _draw_text(image, command)
        elif isinstance(command, DrawRoundRect):
            image = _draw_round_rect(image, command)
        else:
            raise TypeError(f"Unsupported drawing command: {command!r}")
    return image


def _draw_text(image: Image.Image, command: DrawText) -> None:
    font = load_font(command.style, max(1, round(command.size)))
    ImageDraw.Draw(image).text(
        (command.x, command.y),
        command.text,
        fill=command.color,
        font=font,
        anchor=TEXT_ANCHORS[command.align],
    )


def _draw_round_rect(image: Image.Image, command: DrawRoundRect) -> Image.Image:
    box = (command.left, command.top, command.right, command.bottom)

    if command.glow_color and command.glow_radius > 0:
        glow = Image.new("RGBA", image.size, (0, 0, 0, 0))
        ImageDraw.Draw(glow).rounded_rectangle(
            box, radius=command.radius, fill=command.glow_color
        )
        glow = glow.filter(ImageFilter.GaussianBlur(radius=command.glow_radius))
        image = Image.alpha_composite(image, glow)

    ImageDraw.Draw(image).rounded_rectangle(
        box,
        radius=command.radius,
        fill=command.fill,
        outline=command.outline,
        width=max(1, round(command.stroke_width)) if command.outline else 1,
    )
    return image


def render_png(commands: list[DrawCommand], width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    paint(commands, width, height).convert("RGB").save(buffer, format="PNG")
    return buffer.getvalue()
