import logging
import socket
from collections.abc import Callable
from datetime import datetime
from datetime import timedelta
from enum import Enum
from threading import Event
from threading import Thread

from github_wallpaper.core.signals import RefreshSignal
from github_wallpaper.services.contribution_service import fetch_contribution_data
from github_wallpaper.settings import Settings
from github_wallpaper.storage.preferences import UserPreferences

logger = logging.getLogger(__name__)


class WorkResult(str, Enum):
    SUCCESS = "success"
    RETRY = "retry"


class RefreshWorker:
    """Refreshes the cached snapshot for the stored credentials."""

    def __init__(
        self,
        preferences: UserPreferences,
        signal: RefreshSignal,
        graphql_url: str,
        timeout: float = 30.0,
    ) -> None:
        self.preferences = preferences
        self.signal = signal
        self.graphql_url = graphql_url
        self.timeout = timeout

    def do_work(self) -> WorkResult:
        try:
            credentials = self.preferences.get_credentials()
            if credentials is None:
                logger.info("No username stored, skipping refresh")
                return WorkResult.SUCCESS

            logger.info("Refreshing contributions for %s", credentials.username)
            previous = self.preferences.get_cached_data()
            snapshot = fetch_contribution_data(
                username=credentials.username,
                token=credentials.token,
                preferences=self.preferences,
                graphql_url=self.graphql_url,
                timeout=self.timeout,
            )
        except Exception:
            logger.warning("Refresh failed, will retry", exc_info=True)
            return WorkResult.RETRY

        # Saving a new snapshot already signals; a cache fallback still needs
        # a repaint so today's highlight moves.
        if snapshot == previous:
            self.signal.send()
        logger.info("Refresh successful")
        return WorkResult.SUCCESS


def initial_delay(now: datetime, hour: int = 0, minute: int = 5) -> timedelta:
    """Return the time left until the next `hour:minute` after `now`."""

    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return target - now


def has_network_connection(host: str, port: int, timeout: float = 3.0) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class RefreshScheduler:
    """Runs the refresh worker once a day at a fixed local clock time.

    A failed run, or a run attempted without network connectivity, is retried
    after `retry_backoff_seconds`; a successful run waits for the next anchor.
    """

    def __init__(
        self,
        worker: RefreshWorker,
        settings: Settings,
        is_connected: Callable[[], bool] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.worker = worker
        self.refresh_hour = settings.refresh_hour
        self.refresh_minute = settings.refresh_minute
        self.retry_backoff = timedelta(seconds=max(1, settings.retry_backoff_seconds))
        self.is_connected = is_connected or (
            lambda: has_network_connection(
                settings.connectivity_host,
                settings.connectivity_port,
                settings.connectivity_timeout_seconds,
            )
        )
        self.clock = clock
        self._stop = Event()
        self._thread: Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_delay(self, result: WorkResult | None = None) -> timedelta:
        if result is WorkResult.RETRY:
            return self.retry_backoff
        return initial_delay(self.clock(), self.refresh_hour, self.refresh_minute)

    def run_once(self) -> WorkResult:
        if not self.is_connected():
            logger.info("No network connection, refresh postponed")
            return WorkResult.RETRY
        return self.worker.do_work()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = Thread(target=self._run, name="refresh-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        delay = self.next_delay()
        while True:
            logger.info("Next refresh in %s", delay)
            if self._stop.wait(delay.total_seconds()):
                return
            delay = self.next_delay(self.run_once())
