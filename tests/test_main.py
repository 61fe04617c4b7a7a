from collections.abc import Iterator
from datetime import date
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from github_wallpaper.github_api import GitHubTransportError
from github_wallpaper.github_api import GitHubUserNotFoundError
from github_wallpaper.main import create_app
from github_wallpaper.settings import Settings
from github_wallpaper.utils.dates import get_today


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+pysqlite:///:memory:",
        wallpaper_path=str(tmp_path / "wallpaper.png"),
        wallpaper_width=216,
        wallpaper_height=468,
        scheduler_enabled=False,
    )


@pytest.fixture
def client(app_settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


def fake_calendar(make_calendar, days: int = 10):
    today = get_today()
    return make_calendar(
        {today - timedelta(days=offset): 2 for offset in range(days)}
    )


def test_health_live_returns_ok(client: TestClient) -> None:
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_settings_reads_values_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:////tmp/prefs.db")
    monkeypatch.setenv("HEATMAP_YEAR", "2026")

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite:////tmp/prefs.db"
    assert settings.heatmap_year == 2026
    assert settings.refresh_hour == 0
    assert settings.refresh_minute == 5


def test_settings_form_round_trip(client: TestClient) -> None:
    assert client.get("/settings").json() == {
        "username": "",
        "has_token": False,
        "dark_mode": False,
    }

    response = client.put(
        "/settings",
        json={"username": "  octocat ", "token": "ghp_secret", "dark_mode": True},
    )

    assert response.status_code == 200
    assert response.json() == {
        "username": "octocat",
        "has_token": True,
        "dark_mode": True,
    }


def test_blank_token_keeps_stored_token(client: TestClient) -> None:
    client.put("/settings", json={"username": "octocat", "token": "ghp_secret"})

    response = client.put("/settings", json={"username": "octocat", "token": " "})

    assert response.json()["has_token"] is True


def test_stats_without_cache_are_zero(client: TestClient) -> None:
    response = client.get("/stats")

    assert response.status_code == 200
    assert response.json()["current_streak"] == 0
    assert response.json()["last_updated"] is None


def test_set_wallpaper_requires_username(client: TestClient) -> None:
    response = client.post("/wallpaper", json={"username": "   "})

    assert response.status_code == 400
    assert response.json() == {"detail": "Please enter a GitHub username"}


def test_set_wallpaper_fetches_and_writes_image(
    client: TestClient,
    app_settings: Settings,
    monkeypatch: pytest.MonkeyPatch,
    make_calendar,
) -> None:
    calls: list[dict] = []

    def fake_fetch(**kwargs):
        calls.append(kwargs)
        return fake_calendar(make_calendar)

    monkeypatch.setattr(
        "github_wallpaper.services.contribution_service.fetch_contribution_calendar",
        fake_fetch,
    )

    response = client.post(
        "/wallpaper", json={"username": "octocat", "token": "ghp_secret"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["current_streak"] == 10
    assert body["stats"]["today_count"] == 2
    assert body["stats"]["total_contributions"] == 20
    assert body["wallpaper_path"] == app_settings.wallpaper_path
    assert body["wallpaper_written"] is True
    assert calls[0]["token"] == "ghp_secret"
    assert client.get("/settings").json()["username"] == "octocat"
    assert client.get("/stats").json()["current_streak"] == 10


def test_set_wallpaper_failure_without_cache_returns_502(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_fetch(**kwargs):
        raise GitHubUserNotFoundError("User not found: ghost")

    monkeypatch.setattr(
        "github_wallpaper.services.contribution_service.fetch_contribution_calendar",
        fake_fetch,
    )

    response = client.post("/wallpaper", json={"username": "ghost"})

    assert response.status_code == 502
    assert response.json() == {
        "detail": "Failed to fetch contribution data. User not found: ghost"
    }


def test_set_wallpaper_failure_serves_previous_cache(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, make_calendar
) -> None:
    monkeypatch.setattr(
        "github_wallpaper.services.contribution_service.fetch_contribution_calendar",
        lambda **kwargs: fake_calendar(make_calendar, days=3),
    )
    client.post("/wallpaper", json={"username": "octocat"})

    def failing_fetch(**kwargs):
        raise GitHubTransportError("HTTP 503: Service Unavailable")

    monkeypatch.setattr(
        "github_wallpaper.services.contribution_service.fetch_contribution_calendar",
        failing_fetch,
    )

    response = client.post("/wallpaper", json={"username": "octocat"})

    assert response.status_code == 200
    assert response.json()["stats"]["current_streak"] == 3


def test_wallpaper_image_endpoint_returns_png(client: TestClient) -> None:
    response = client.get("/wallpaper.png", params={"width": 120, "height": 260})

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_wallpaper_image_endpoint_validates_size(client: TestClient) -> None:
    response = client.get("/wallpaper.png", params={"width": 0})

    assert response.status_code == 422


def test_stats_display_formats_last_update(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, make_calendar
) -> None:
    monkeypatch.setattr(
        "github_wallpaper.services.contribution_service.fetch_contribution_calendar",
        lambda **kwargs: make_calendar({date(2026, 1, 2): 1}),
    )
    client.post("/wallpaper", json={"username": "octocat"})

    body = client.get("/stats").json()

    assert body["username"] == "octocat"
    assert body["total_contributions"] == 1
    assert body["last_updated_display"]


def test_scheduler_runs_by_default(tmp_path) -> None:
    settings = Settings(
        _env_file=None,
        database_url="sqlite+pysqlite:///:memory:",
        wallpaper_path=str(tmp_path / "wallpaper.png"),
        wallpaper_width=216,
        wallpaper_height=468,
    )
    app = create_app(settings)

    assert settings.scheduler_enabled is True
    with TestClient(app):
        assert app.state.scheduler.running is True
    assert app.state.scheduler.running is False


def test_set_wallpaper_repaints_once(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, make_calendar
) -> None:
    surface = client.app.state.surface
    render = surface.render
    renders: list[bytes] = []

    def counting_render() -> bytes:
        renders.append(render())
        return renders[-1]

    monkeypatch.setattr(surface, "render", counting_render)
    monkeypatch.setattr(
        "github_wallpaper.services.contribution_service.fetch_contribution_calendar",
        lambda **kwargs: fake_calendar(make_calendar),
    )

    response = client.post("/wallpaper", json={"username": "octocat"})

    assert response.json()["wallpaper_written"] is True
    assert len(renders) == 1
