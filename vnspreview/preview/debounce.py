from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IDebouncer(ABC):
    """Runs only the most recently scheduled callback once things go quiet."""

    @abstractmethod
    def schedule(self, fn: Callable[[], None]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def cancel(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @property
    def pending(self) -> bool:  # pragma: no cover - interface
        return False


class ThreadingDebouncer(IDebouncer):
    """Debouncer on top of ``threading.Timer``.

    A new schedule cancels the pending timer. A callback that already
    started is never interrupted.
    """

    def __init__(self, interval_ms: int = 300) -> None:
        self.interval_ms = max(0, int(interval_ms))
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def schedule(self, fn: Callable[[], None]) -> None:
        def fire() -> None:
            with self._lock:
                if self._timer is not timer:
                    return
                self._timer = None
            fn()

        timer = threading.Timer(self.interval_ms / 1000.0, fire)
        timer.daemon = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
        logger.debug("Scheduled evaluation in %d ms", self.interval_ms)
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None
