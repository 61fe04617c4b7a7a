import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from github_wallpaper.api.routes.wallpaper import router
from github_wallpaper.core.middleware import FetchRateLimitMiddleware
from github_wallpaper.core.observability import configure_logging
from github_wallpaper.core.observability import init_sentry
from github_wallpaper.core.signals import RefreshSignal
from github_wallpaper.db import create_session_factory
from github_wallpaper.settings import Settings
from github_wallpaper.storage.preferences import UserPreferences
from github_wallpaper.wallpaper.surface import WallpaperSurface
from github_wallpaper.worker.refresh import RefreshScheduler
from github_wallpaper.worker.refresh import RefreshWorker

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the application and wire store, surface and scheduler together.

    Run with `uvicorn --factory github_wallpaper.main:create_app`.
    """

    app_settings = app_settings or Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    signal = RefreshSignal()
    preferences = UserPreferences(
        create_session_factory(app_settings.database_url), signal=signal
    )
    surface = WallpaperSurface(
        preferences,
        signal,
        output_path=app_settings.wallpaper_path,
        width=app_settings.wallpaper_width,
        height=app_settings.wallpaper_height,
        year=app_settings.heatmap_year,
    )
    worker = RefreshWorker(
        preferences,
        signal,
        graphql_url=app_settings.github_graphql_url,
        timeout=app_settings.request_timeout_seconds,
    )
    scheduler = RefreshScheduler(worker, app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        surface.on_create()
        surface.draw_frame()
        if app_settings.scheduler_enabled:
            scheduler.start()
        try:
            yield
        finally:
            scheduler.stop()
            surface.on_destroy()

    app = FastAPI(title="GitHub Wallpaper", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.signal = signal
    app.state.preferences = preferences
    app.state.surface = surface
    app.state.scheduler = scheduler

    app.add_middleware(
        FetchRateLimitMiddleware,
        requests_per_window=app_settings.rate_limit_per_minute,
        window_seconds=app_settings.rate_limit_window_seconds,
    )
    app.include_router(router)

    logger.info("GitHub wallpaper app created (%s)", app_settings.environment)
    return app
