from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    github_graphql_url: str = "https://api.github.com/graphql"
    request_timeout_seconds: float = 30.0
    database_url: str = "sqlite:///github_wallpaper.db"

    wallpaper_path: str = "wallpaper.png"
    wallpaper_width: int = 1080
    wallpaper_height: int = 2340
    heatmap_year: int | None = None

    scheduler_enabled: bool = True
    refresh_hour: int = Field(default=0, ge=0, le=23)
    refresh_minute: int = Field(default=5, ge=0, le=59)
    retry_backoff_seconds: int = 900
    connectivity_host: str = "api.github.com"
    connectivity_port: int = 443
    connectivity_timeout_seconds: float = 3.0

    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
