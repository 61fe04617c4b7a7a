import logging
from collections.abc import Callable
from threading import RLock

logger = logging.getLogger(__name__)


class RefreshSignal:
    """In-process notification telling the wallpaper to reload and repaint."""

    def __init__(self) -> None:
        self._receivers: list[Callable[[], None]] = []
        self._lock = RLock()

    def connect(self, receiver: Callable[[], None]) -> None:
        with self._lock:
            if receiver not in self._receivers:
                self._receivers.append(receiver)

    def disconnect(self, receiver: Callable[[], None]) -> None:
        with self._lock:
            if receiver in self._receivers:
                self._receivers.remove(receiver)

    def send(self) -> int:
        """Notify every receiver and return how many were called."""

        with self._lock:
            receivers = list(self._receivers)

        for receiver in receivers:
            try:
                receiver()
            except Exception:
                logger.exception("Refresh receiver %r failed", receiver)
        return len(receivers)
