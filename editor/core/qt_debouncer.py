from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

from vnspreview.preview.debounce import IDebouncer


class QtDebouncer(IDebouncer):
    """Single-shot QTimer debouncer; callbacks run on the GUI thread."""

    def __init__(self, interval_ms: int = 300, parent: QObject | None = None) -> None:
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)
        self._fn: Optional[Callable[[], None]] = None
        self.set_interval(interval_ms)

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def set_interval(self, interval_ms: int) -> None:
        self._timer.setInterval(max(0, int(interval_ms)))

    def schedule(self, fn: Callable[[], None]) -> None:
        self._fn = fn
        # restarting the timer drops the pending shot
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()
        self._fn = None

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    def _fire(self) -> None:
        fn, self._fn = self._fn, None
        if fn is not None:
            fn()
