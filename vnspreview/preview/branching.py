from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Optional, Sequence

from .types import Cursor, DebugLocation

logger = logging.getLogger(__name__)

Probe = Callable[[int], Optional[DebugLocation]]


def pick_branch(start_lines: Sequence[float], cursor_line: int) -> int:
    """Index of the last branch starting at or before ``cursor_line``.

    Branches are laid out in ascending source order, so a cursor between the
    starts of branch k and k+1 is inside branch k. Defaults to 0 when the
    cursor precedes every branch.
    """
    best = 0
    for i, start in enumerate(start_lines):
        if start <= cursor_line:
            best = i
    return best


def select_branch(choices: Sequence[Any], cursor: Cursor, probe: Probe) -> int:
    if len(choices) <= 1:
        return 0
    start_lines: List[float] = []
    for i in range(len(choices)):
        location = probe(i)
        start_lines.append(location.start_line if location is not None else math.inf)
    index = pick_branch(start_lines, cursor.line)
    logger.debug("Branch starts %s, cursor line %d -> choice %d", start_lines, cursor.line, index)
    return index


class StoryProbe:
    """Speculatively enters choices of a story parked at a choice point.

    Used as a context manager: the state saved on entry is restored before
    every probe but the first and once more on exit, exceptions included.
    """

    def __init__(self, story: Any) -> None:
        self.story = story
        self._saved: Optional[str] = None
        self._probes = 0

    def __enter__(self) -> "StoryProbe":
        self._saved = self.story.state.to_json()
        self._probes = 0
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._saved is not None:
            self.story.state.load_json(self._saved)
            self._saved = None

    def __call__(self, index: int) -> Optional[DebugLocation]:
        if self._saved is None:
            raise RuntimeError("StoryProbe used outside of its with-block")
        if self._probes:
            self.story.state.load_json(self._saved)
        self._probes += 1
        self.story.choose_choice_index(index)
        return DebugLocation.from_metadata(self.story.current_debug_metadata)


def choose_branch_index(story: Any, cursor: Cursor) -> int:
    """Pick the choice whose branch contains the cursor, leaving the story untouched."""
    choices = story.current_choices
    if len(choices) <= 1:
        return 0
    with StoryProbe(story) as probe:
        return select_branch(choices, cursor, probe)
