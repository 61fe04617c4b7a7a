from datetime import datetime

from pydantic import BaseModel
from pydantic import Field


class SettingsUpdate(BaseModel):
    """Credentials and theme entered on the settings form."""

    username: str = Field(default="", max_length=100)
    token: str | None = None
    dark_mode: bool = False


class SettingsResponse(BaseModel):
    username: str
    has_token: bool
    dark_mode: bool


class StatsResponse(BaseModel):
    """Read-only streak statistics shown below the form."""

    username: str | None = None
    current_streak: int = 0
    longest_streak: int = 0
    today_count: int = 0
    total_contributions: int = 0
    last_updated: datetime | None = None
    last_updated_display: str | None = None


class WallpaperRequest(BaseModel):
    """Payload of the "set as wallpaper" action."""

    username: str = Field(default="", max_length=100)
    token: str | None = None


class WallpaperResponse(BaseModel):
    stats: StatsResponse
    wallpaper_path: str
    wallpaper_written: bool
