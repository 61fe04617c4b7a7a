import logging
import os
import random
from pathlib import Path
from threading import RLock

from github_wallpaper.core.signals import RefreshSignal
from github_wallpaper.render.layout import build_heatmap_commands
from github_wallpaper.render.painter import render_png
from github_wallpaper.snapshot import Snapshot
from github_wallpaper.storage.preferences import UserPreferences
from github_wallpaper.utils.dates import get_today

logger = logging.getLogger(__name__)


class WallpaperSurface:
    """Background surface that repaints the wallpaper image on demand.

    The surface keeps the last loaded snapshot and theme, reloads them when
    the refresh signal fires and writes the rendered PNG to `output_path`.
    """

    def __init__(
        self,
        preferences: UserPreferences,
        signal: RefreshSignal,
        output_path: str | Path,
        width: int,
        height: int,
        year: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.preferences = preferences
        self.signal = signal
        self.output_path = Path(output_path)
        self.width = width
        self.height = height
        self.year = year
        self.visible = True
        self.cached_data: Snapshot | None = None
        self.dark_mode = False
        self.frame_written = False
        self._rng = rng or random.Random()
        self._lock = RLock()

    def on_create(self) -> None:
        self.signal.connect(self.on_refresh)
        self.load_data()

    def on_destroy(self) -> None:
        self.signal.disconnect(self.on_refresh)

    def on_surface_changed(self, width: int, height: int) -> None:
        with self._lock:
            self.width = width
            self.height = height
        self.draw_frame()

    def on_visibility_changed(self, visible: bool) -> None:
        self.visible = visible
        if visible:
            self.draw_frame()

    def on_refresh(self) -> None:
        self.load_data()
        self.draw_frame()

    def load_data(self) -> None:
        with self._lock:
            self.cached_data = self.preferences.get_cached_data()
            self.dark_mode = self.preferences.get_dark_mode()

    def render(self) -> bytes:
        with self._lock:
            year = self.year or get_today().year
            commands = build_heatmap_commands(
                self.width,
                self.height,
                self.dark_mode,
                self.cached_data,
                year,
                rng=self._rng,
            )
            return render_png(commands, self.width, self.height)

    def draw_frame(self) -> bool:
        """Render and write the wallpaper, returning whether it was written."""

        if not self.visible or self.width <= 0 or self.height <= 0:
            return False

        try:
            content = self.render()
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.output_path.with_name(f".{self.output_path.name}.tmp")
            temp_path.write_bytes(content)
            os.replace(temp_path, self.output_path)
        except Exception:
            logger.exception("Drawing wallpaper to %s failed", self.output_path)
            self.frame_written = False
            return False

        self.frame_written = True
        logger.debug("Wallpaper written to %s", self.output_path)
        return True
