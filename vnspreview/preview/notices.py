from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class INoticeObserver(ABC):
    """Receives the runtime warnings/errors a story reports while stepping."""

    @abstractmethod
    def on_notice(self, message: str, kind: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def attach(self, story: Any) -> None:
        story.on_error = self.on_notice


class SilentNoticeObserver(INoticeObserver):
    """Absorbs every notice so a malformed script still previews."""

    def __init__(self) -> None:
        self.absorbed = 0

    def on_notice(self, message: str, kind: str) -> None:
        self.absorbed += 1
        logger.debug("Absorbed runtime %s: %s", kind, message)
