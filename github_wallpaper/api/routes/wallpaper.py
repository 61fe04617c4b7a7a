import random

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import Request
from fastapi import Response

from github_wallpaper.api.schemas.wallpaper import SettingsResponse
from github_wallpaper.api.schemas.wallpaper import SettingsUpdate
from github_wallpaper.api.schemas.wallpaper import StatsResponse
from github_wallpaper.api.schemas.wallpaper import WallpaperRequest
from github_wallpaper.api.schemas.wallpaper import WallpaperResponse
from github_wallpaper.render.layout import build_heatmap_commands
from github_wallpaper.render.painter import render_png
from github_wallpaper.services.contribution_service import FetchFailedError
from github_wallpaper.services.contribution_service import fetch_contribution_data
from github_wallpaper.settings import Settings
from github_wallpaper.snapshot import Snapshot
from github_wallpaper.storage.preferences import UserPreferences
from github_wallpaper.utils.dates import format_date
from github_wallpaper.utils.dates import get_today
from github_wallpaper.wallpaper.surface import WallpaperSurface


router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_preferences(request: Request) -> UserPreferences:
    return request.app.state.preferences


def get_surface(request: Request) -> WallpaperSurface:
    return request.app.state.surface


def build_stats_response(snapshot: Snapshot | None) -> StatsResponse:
    if snapshot is None:
        return StatsResponse()

    return StatsResponse(
        username=snapshot.username,
        current_streak=snapshot.current_streak,
        longest_streak=snapshot.longest_streak,
        today_count=snapshot.today_count,
        total_contributions=snapshot.total_contributions,
        last_updated=snapshot.last_updated,
        last_updated_display=format_date(snapshot.last_updated.date()),
    )


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/settings")
def read_settings(
    preferences: UserPreferences = Depends(get_preferences),
) -> SettingsResponse:
    return SettingsResponse(
        username=preferences.get_username() or "",
        has_token=bool(preferences.get_token()),
        dark_mode=preferences.get_dark_mode(),
    )


@router.put("/settings")
def update_settings(
    payload: SettingsUpdate,
    preferences: UserPreferences = Depends(get_preferences),
) -> SettingsResponse:
    """Store the form values; a blank token keeps the stored one."""

    username = payload.username.strip()
    if username:
        preferences.save_username(username)
    if payload.token and payload.token.strip():
        preferences.save_token(payload.token.strip())
    if payload.dark_mode != preferences.get_dark_mode():
        preferences.save_dark_mode(payload.dark_mode)

    return read_settings(preferences)


@router.get("/stats")
def read_stats(
    preferences: UserPreferences = Depends(get_preferences),
) -> StatsResponse:
    return build_stats_response(preferences.get_cached_data())


@router.post("/wallpaper")
def set_wallpaper(
    payload: WallpaperRequest,
    settings: Settings = Depends(get_settings),
    preferences: UserPreferences = Depends(get_preferences),
    surface: WallpaperSurface = Depends(get_surface),
) -> WallpaperResponse:
    """Save credentials, fetch contributions and repaint the wallpaper."""

    username = payload.username.strip()
    if not username:
        raise HTTPException(status_code=400, detail="Please enter a GitHub username")

    token = payload.token.strip() if payload.token else ""
    preferences.save_username(username)
    if token:
        preferences.save_token(token)

    try:
        snapshot = fetch_contribution_data(
            username=username,
            token=token or None,
            preferences=preferences,
            graphql_url=settings.github_graphql_url,
            timeout=settings.request_timeout_seconds,
        )
    except FetchFailedError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"Failed to fetch contribution data. {exc}",
        ) from exc

    # A freshly cached snapshot has already been painted through the signal.
    if surface.cached_data != snapshot or not surface.frame_written:
        surface.load_data()
        surface.draw_frame()
    return WallpaperResponse(
        stats=build_stats_response(snapshot),
        wallpaper_path=str(surface.output_path),
        wallpaper_written=surface.frame_written,
    )


@router.get("/wallpaper.png")
def read_wallpaper_image(
    width: int | None = Query(default=None, ge=1, le=8192),
    height: int | None = Query(default=None, ge=1, le=8192),
    settings: Settings = Depends(get_settings),
    preferences: UserPreferences = Depends(get_preferences),
) -> Response:
    """Render the cached snapshot with the stored theme as a PNG."""

    width = width or settings.wallpaper_width
    height = height or settings.wallpaper_height
    commands = build_heatmap_commands(
        width,
        height,
        preferences.get_dark_mode(),
        preferences.get_cached_data(),
        settings.heatmap_year or get_today().year,
        rng=random.Random(),
    )
    return Response(content=render_png(commands, width, height), media_type="image/png")
