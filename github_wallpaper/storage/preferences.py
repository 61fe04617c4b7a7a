import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker

from github_wallpaper.core.signals import RefreshSignal
from github_wallpaper.models import Preference
from github_wallpaper.snapshot import Credentials
from github_wallpaper.snapshot import Snapshot

logger = logging.getLogger(__name__)

USERNAME_KEY = "github_username"
TOKEN_KEY = "github_token"
DARK_MODE_KEY = "dark_mode"
CACHED_DATA_KEY = "cached_contribution_data"


class UserPreferences:
    """Persisted key-value store for credentials, theme and the cached snapshot.

    Every save is a single upsert committed in its own session. Saving the
    snapshot or the theme flag notifies `signal` so the wallpaper repaints.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        signal: RefreshSignal | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._signal = signal

    def _read(self, key: str) -> str | None:
        with self._session_factory() as db:
            return db.scalar(select(Preference.value).where(Preference.key == key))

    def _write(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            preference = db.get(Preference, key)
            if preference is None:
                db.add(Preference(key=key, value=value))
            else:
                preference.value = value
            db.commit()

    def _notify(self) -> None:
        if self._signal is not None:
            self._signal.send()

    def save_username(self, username: str) -> None:
        self._write(USERNAME_KEY, username)

    def get_username(self) -> str | None:
        return self._read(USERNAME_KEY)

    def save_token(self, token: str) -> None:
        self._write(TOKEN_KEY, token)

    def get_token(self) -> str | None:
        return self._read(TOKEN_KEY)

    def save_dark_mode(self, enabled: bool) -> None:
        self._write(DARK_MODE_KEY, "true" if enabled else "false")
        self._notify()

    def get_dark_mode(self) -> bool:
        return self._read(DARK_MODE_KEY) == "true"

    def get_credentials(self) -> Credentials | None:
        username = self.get_username()
        if not username:
            return None
        return Credentials(username=username, token=self.get_token() or None)

    def save_cached_data(self, snapshot: Snapshot) -> None:
        self._write(CACHED_DATA_KEY, snapshot.model_dump_json())
        self._notify()

    def get_cached_data(self) -> Snapshot | None:
        raw_value = self._read(CACHED_DATA_KEY)
        if raw_value is None:
            return None

        try:
            return Snapshot.model_validate_json(raw_value)
        except ValidationError:
            logger.warning("Ignoring unreadable cached contribution data")
            return None
